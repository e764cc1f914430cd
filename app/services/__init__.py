"""
app/services package marker.
"""

from app.services.audit_service import AuditRecorder
from app.services.deal_lifecycle_service import (
    DealLifecycleService,
    get_deal_lifecycle_service,
    resolve_initial_status,
)
from app.services.deal_scan_service import DealScanService, get_deal_scan_service
from app.services.position_locks import PositionLockRegistry, get_position_lock_registry
from app.services.scan_confirmation_service import (
    ScanConfirmationService,
    get_scan_confirmation_service,
)

__all__ = [
    "AuditRecorder",
    "DealLifecycleService",
    "get_deal_lifecycle_service",
    "resolve_initial_status",
    "DealScanService",
    "get_deal_scan_service",
    "PositionLockRegistry",
    "get_position_lock_registry",
    "ScanConfirmationService",
    "get_scan_confirmation_service",
]
