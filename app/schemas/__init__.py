"""
app/schemas package marker.
"""

from app.schemas.deal_finder import (
    ConfirmRequest,
    ConfirmResponse,
    ScanItemResponse,
    ScanRequest,
    ScanResultResponse,
)
from app.schemas.deals import (
    DealCreateRequest,
    DealDetailResponse,
    DealReplaceRequest,
    DealReplaceResponse,
    DealResponse,
    DealStatusUpdateRequest,
)

__all__ = [
    "ConfirmRequest",
    "ConfirmResponse",
    "ScanItemResponse",
    "ScanRequest",
    "ScanResultResponse",
    "DealCreateRequest",
    "DealDetailResponse",
    "DealReplaceRequest",
    "DealReplaceResponse",
    "DealResponse",
    "DealStatusUpdateRequest",
]
