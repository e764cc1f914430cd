"""
app/domain package marker.
"""

from app.domain.deal_reconciliation import (
    BrandInfo,
    BrandMatch,
    ConfirmOutcome,
    DealInfo,
    ExtractedLink,
    ScanAnalysis,
    ScanItemDraft,
)
from app.domain.deals import DealCreateInput, DealReplaceInput, DealWithChain

__all__ = [
    "BrandInfo",
    "BrandMatch",
    "ConfirmOutcome",
    "DealCreateInput",
    "DealInfo",
    "DealReplaceInput",
    "DealWithChain",
    "ExtractedLink",
    "ScanAnalysis",
    "ScanItemDraft",
]
