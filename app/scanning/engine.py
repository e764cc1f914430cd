"""
Deal scan engine: fetch an asset page and classify its affiliate links
against the brand/deal snapshot.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from app.domain.deal_reconciliation import (
    BrandInfo,
    DealInfo,
    ExtractedLink,
    ScanAnalysis,
    ScanItemDraft,
)
from app.scanning.classifier import is_likely_affiliate_link
from app.scanning.fetcher import PageFetcher
from app.scanning.link_extractor import extract_links
from app.scanning.logging_utils import log_event
from app.scanning.matching import match_brand, match_deal
from app.scanning.normalization import normalize_domain
from app.scanning.types import LinkHarvest
from db.models.scan_result import ScanItemType

logger = logging.getLogger(__name__)

VERIFIED_CONFIDENCE = 1.0
REPLACEMENT_CONFIDENCE = 0.8


def _link_drifted(link: ExtractedLink, deal: DealInfo) -> bool:
    if not deal.affiliate_link:
        return False
    return normalize_domain(link.url) != normalize_domain(deal.affiliate_link)


def classify_link(
    link: ExtractedLink,
    brands: Sequence[BrandInfo],
    deals: Sequence[DealInfo],
    matched_deal_ids: set[uuid.UUID],
) -> ScanItemDraft:
    """
    Classify one candidate link, recording any deal it accounts for in
    ``matched_deal_ids``.
    """

    deal = match_deal(link, deals)
    brand_match = match_brand(link, brands)
    brand_id = brand_match.brand.brand_id if brand_match else None

    if deal is not None:
        matched_deal_ids.add(deal.deal_id)
        if _link_drifted(link, deal):
            return ScanItemDraft(
                type=ScanItemType.REPLACEMENT,
                found_url=link.url,
                found_anchor=link.anchor,
                matched_deal_id=deal.deal_id,
                matched_brand_id=brand_id,
                confidence=brand_match.confidence if brand_match else REPLACEMENT_CONFIDENCE,
                notes="URL differs from recorded affiliate link",
            )
        return ScanItemDraft(
            type=ScanItemType.VERIFIED,
            found_url=link.url,
            found_anchor=link.anchor,
            matched_deal_id=deal.deal_id,
            matched_brand_id=brand_id,
            confidence=VERIFIED_CONFIDENCE,
            notes=None,
        )

    if brand_match is not None:
        brand_deal = next((item for item in deals if item.brand_id == brand_id), None)
        if brand_deal is not None:
            # Suppresses a Missing item for the brand's deal even though the URLs disagree.
            matched_deal_ids.add(brand_deal.deal_id)
            return ScanItemDraft(
                type=ScanItemType.REPLACEMENT,
                found_url=link.url,
                found_anchor=link.anchor,
                matched_deal_id=brand_deal.deal_id,
                matched_brand_id=brand_id,
                confidence=brand_match.confidence,
                notes="Brand matched but different URL than recorded deal",
            )
        return ScanItemDraft(
            type=ScanItemType.NEW_UNMATCHED,
            found_url=link.url,
            found_anchor=link.anchor,
            matched_deal_id=None,
            matched_brand_id=brand_id,
            confidence=brand_match.confidence,
            notes=f"Brand detected: {brand_match.brand.name}",
        )

    return ScanItemDraft(
        type=ScanItemType.NEW_UNMATCHED,
        found_url=link.url,
        found_anchor=link.anchor,
        matched_deal_id=None,
        matched_brand_id=None,
        confidence=None,
        notes="Unrecognized affiliate link",
    )


def classify_links(
    candidates: Sequence[ExtractedLink],
    brands: Sequence[BrandInfo],
    deals: Sequence[DealInfo],
) -> list[ScanItemDraft]:
    """
    Build the ordered item list for one scan.

    Link items come first in page order, followed by one Missing item per
    occupying deal that no link accounted for.
    """

    matched_deal_ids: set[uuid.UUID] = set()
    items = [classify_link(link, brands, deals, matched_deal_ids) for link in candidates]

    for deal in deals:
        if deal.deal_id in matched_deal_ids:
            continue
        items.append(
            ScanItemDraft(
                type=ScanItemType.MISSING,
                found_url=deal.affiliate_link,
                found_anchor=None,
                matched_deal_id=deal.deal_id,
                matched_brand_id=deal.brand_id,
                confidence=None,
                notes="Active deal link not found on page",
            )
        )
    return items


class DealScanEngine:
    """
    Fetches asset pages and turns them into classified scan findings.
    """

    def __init__(self, *, fetcher: PageFetcher) -> None:
        self._fetcher = fetcher

    def harvest(self, asset_domain: str) -> LinkHarvest:
        """
        Fetch ``https://{asset_domain}`` and collect candidate affiliate links.

        Raises FetchFailure when the page cannot be fetched.
        """

        scanned_url = f"https://{asset_domain.strip()}"
        html = self._fetcher.fetch(scanned_url)
        links = extract_links(html, asset_domain)
        candidates = [link for link in links if is_likely_affiliate_link(link.url)]
        log_event(
            logger,
            logging.INFO,
            "asset_page_harvested",
            scanned_url=scanned_url,
            total_links=len(links),
            affiliate_links=len(candidates),
        )
        return LinkHarvest(scanned_url=scanned_url, links=links, candidates=candidates)

    @staticmethod
    def analyze(
        harvest: LinkHarvest,
        *,
        brands: Sequence[BrandInfo],
        deals: Sequence[DealInfo],
    ) -> ScanAnalysis:
        return ScanAnalysis(
            scanned_url=harvest.scanned_url,
            total_links=len(harvest.links),
            affiliate_links=len(harvest.candidates),
            items=classify_links(harvest.candidates, brands, deals),
        )
