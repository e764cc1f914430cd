"""
app/domain/deal_reconciliation.py

Domain models for asset scanning and scan-item confirmation.
"""

from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExtractedLink:
    """
    One distinct outbound anchor found on an asset page.
    """

    url: str
    anchor: str
    domain: str


@dataclass(frozen=True)
class BrandInfo:
    """
    Scan-time snapshot of an Active brand with a registered domain.
    """

    brand_id: uuid.UUID
    partner_id: uuid.UUID
    name: str
    brand_domain: str | None


@dataclass(frozen=True)
class DealInfo:
    """
    Scan-time snapshot of an occupying deal on the scanned asset.
    """

    deal_id: uuid.UUID
    partner_id: uuid.UUID
    brand_id: uuid.UUID
    affiliate_link: str | None
    tracking_domain: str | None
    position_id: uuid.UUID


@dataclass(frozen=True)
class BrandMatch:
    brand: BrandInfo
    confidence: float


@dataclass(frozen=True)
class ScanItemDraft:
    """
    One classified finding before persistence.
    """

    type: str
    found_url: str | None
    found_anchor: str | None
    matched_deal_id: uuid.UUID | None
    matched_brand_id: uuid.UUID | None
    confidence: float | None
    notes: str | None


@dataclass(frozen=True)
class ScanAnalysis:
    """
    Result of fetching and classifying one asset page.
    """

    scanned_url: str
    total_links: int
    affiliate_links: int
    items: list[ScanItemDraft] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return dict(Counter(item.type for item in self.items))


@dataclass(frozen=True)
class ConfirmOutcome:
    """
    Result of one confirmation decision.

    ``outcome`` is one of ``ignored``, ``acknowledged``, ``deal_ended`` or
    ``deal_created``.
    """

    item_id: uuid.UUID
    item_action: str
    outcome: str
    deal_id: uuid.UUID | None = None
