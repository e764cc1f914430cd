"""
Repository layer exports.
"""

from db.repositories.asset_repository import AssetRepository
from db.repositories.audit_log_repository import AuditLogRepository
from db.repositories.deal_repository import DealRepository
from db.repositories.partner_repository import PartnerRepository
from db.repositories.scan_result_repository import ScanResultRepository

__all__ = [
    "AssetRepository",
    "AuditLogRepository",
    "DealRepository",
    "PartnerRepository",
    "ScanResultRepository",
]
