"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.asset import Asset, Page, Position
from db.models.audit_log import AuditLog
from db.models.brand import Brand
from db.models.deal import Deal
from db.models.partner import Partner
from db.models.scan_result import ScanResult, ScanResultItem

__all__ = [
    "Asset",
    "AuditLog",
    "Brand",
    "Deal",
    "Page",
    "Partner",
    "Position",
    "ScanResult",
    "ScanResultItem",
]
