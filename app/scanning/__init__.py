"""
Asset page scanning: extraction, classification and matching of outbound links.
"""

from app.scanning.classifier import AFFILIATE_LINK_PATTERNS, is_likely_affiliate_link
from app.scanning.engine import DealScanEngine, classify_links
from app.scanning.fetcher import PageFetcher
from app.scanning.link_extractor import extract_links
from app.scanning.matching import BRAND_MATCH_CONFIDENCE, match_brand, match_deal
from app.scanning.normalization import is_same_site, normalize_domain

__all__ = [
    "AFFILIATE_LINK_PATTERNS",
    "BRAND_MATCH_CONFIDENCE",
    "DealScanEngine",
    "PageFetcher",
    "classify_links",
    "extract_links",
    "is_likely_affiliate_link",
    "is_same_site",
    "match_brand",
    "match_deal",
    "normalize_domain",
]
