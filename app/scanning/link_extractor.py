"""
BeautifulSoup-based outbound link extraction for asset pages.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from app.domain.deal_reconciliation import ExtractedLink
from app.scanning.normalization import is_same_site, normalize_domain

_NAVIGABLE_PREFIXES = ("http://", "https://", "//")


def _clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def _absolute_url(href: str) -> str | None:
    """
    Return the absolute URL for an external navigational href, or None.

    Relative paths, fragments, ``mailto:`` and ``javascript:`` hrefs can never
    be affiliate links and are skipped.
    """

    if not href.lower().startswith(_NAVIGABLE_PREFIXES):
        return None
    if href.startswith("//"):
        return f"https:{href}"
    return href


def _hostname(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def extract_links(html: str, asset_domain: str) -> list[ExtractedLink]:
    """
    Return distinct outbound anchors from ``html`` with their visible text.

    Links pointing at the asset itself (same domain or a subdomain of it)
    are excluded. Unparsable hrefs are dropped silently. Results are
    deduplicated by absolute URL, first occurrence wins.
    """

    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    links: list[ExtractedLink] = []

    for node in soup.find_all("a", href=True):
        href = str(node.get("href") or "").strip()
        url = _absolute_url(href)
        if url is None:
            continue

        hostname = _hostname(url)
        if not hostname:
            continue

        domain = normalize_domain(hostname)
        if is_same_site(domain, asset_domain):
            continue

        if url in seen:
            continue
        seen.add(url)

        links.append(
            ExtractedLink(
                url=url,
                anchor=_clean_text(node.get_text(" ", strip=True)),
                domain=domain,
            )
        )

    return links
