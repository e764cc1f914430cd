"""
app/domain/errors.py

Exception taxonomy for the deal reconciliation engine.

Every error carries a stable ``code`` from ``app.failure_codes`` plus the
ids relevant to recovery, so callers never see a bare "failed".
"""

from __future__ import annotations

import uuid
from typing import Any

from app import failure_codes


def _stringify(details: dict[str, Any]) -> dict[str, Any]:
    return {
        key: str(value) if isinstance(value, uuid.UUID) else value
        for key, value in details.items()
        if value is not None
    }


class ReconciliationError(Exception):
    """Base exception for scan, confirmation and deal lifecycle failures."""

    code: str = failure_codes.INTERNAL_ERROR

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = _stringify(details)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFoundError(ReconciliationError):
    """Raised when a referenced record does not exist."""


class AssetNotFound(NotFoundError):
    code = failure_codes.ASSET_NOT_FOUND


class ScanNotFound(NotFoundError):
    code = failure_codes.SCAN_NOT_FOUND


class ScanItemNotFound(NotFoundError):
    code = failure_codes.SCAN_ITEM_NOT_FOUND


class PartnerNotFound(NotFoundError):
    code = failure_codes.PARTNER_NOT_FOUND


class BrandNotFound(NotFoundError):
    code = failure_codes.BRAND_NOT_FOUND


class PositionNotFound(NotFoundError):
    code = failure_codes.POSITION_NOT_FOUND


class DealNotFound(NotFoundError):
    code = failure_codes.DEAL_NOT_FOUND


class FetchFailure(ReconciliationError):
    """Network error or timeout fetching an asset page. Never retried automatically."""

    code = failure_codes.FETCH_FAILURE


class ValidationError(ReconciliationError):
    """Raised before any mutation when required input is missing."""

    code = failure_codes.VALIDATION_ERROR


class AlreadyProcessed(ReconciliationError):
    """Raised when a scan item has already left the Pending state."""

    code = failure_codes.ALREADY_PROCESSED


class BrandPartnerMismatch(ReconciliationError):
    code = failure_codes.BRAND_PARTNER_MISMATCH


class PositionOccupied(ReconciliationError):
    code = failure_codes.POSITION_OCCUPIED


class DealNotActive(ReconciliationError):
    """Raised when an operation requires an occupying deal."""

    code = failure_codes.DEAL_NOT_ACTIVE


class InternalReconciliationError(ReconciliationError):
    code = failure_codes.INTERNAL_ERROR
