"""
Brand and deal matchers for extracted links.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import SplitResult, urlsplit

from app.domain.deal_reconciliation import BrandInfo, BrandMatch, DealInfo, ExtractedLink
from app.scanning.normalization import is_same_site

BRAND_MATCH_CONFIDENCE = 0.7

_TRAILING_SLASHES = re.compile(r"/+$")


def match_brand(link: ExtractedLink, brands: Sequence[BrandInfo]) -> BrandMatch | None:
    """
    Map a link to the brand whose registered domain covers the link's domain.

    Confidence is constant, so among several candidates the first one wins.
    """

    best: BrandMatch | None = None
    for brand in brands:
        if not brand.brand_domain:
            continue
        if not is_same_site(link.domain, brand.brand_domain):
            continue
        if best is None or BRAND_MATCH_CONFIDENCE > best.confidence:
            best = BrandMatch(brand=brand, confidence=BRAND_MATCH_CONFIDENCE)
    return best


def _split(url: str) -> SplitResult | None:
    try:
        return urlsplit(url)
    except ValueError:
        return None


def _strip_trailing_slashes(url: str) -> str:
    return _TRAILING_SLASHES.sub("", url).lower()


def _same_host_and_path(link_url: str, deal_url: str) -> bool:
    link_parts = _split(link_url)
    deal_parts = _split(deal_url)
    if link_parts is None or deal_parts is None:
        return False
    if not link_parts.hostname or link_parts.hostname != deal_parts.hostname:
        return False
    return (link_parts.path or "/") == (deal_parts.path or "/")


def match_deal(link: ExtractedLink, deals: Sequence[DealInfo]) -> DealInfo | None:
    """
    Map a link to an occupying deal.

    A tracking-domain hit on any deal wins outright. Otherwise each deal is
    compared by exact URL, by case-insensitive URL without trailing slashes,
    then by hostname and path ignoring the query string.
    """

    for deal in deals:
        if deal.tracking_domain and is_same_site(link.domain, deal.tracking_domain):
            return deal

    normalized_link = _strip_trailing_slashes(link.url)
    for deal in deals:
        if not deal.affiliate_link:
            continue
        if link.url == deal.affiliate_link:
            return deal
        if normalized_link == _strip_trailing_slashes(deal.affiliate_link):
            return deal
        if _same_host_and_path(link.url, deal.affiliate_link):
            return deal

    return None
