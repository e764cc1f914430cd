"""
Shared scanning runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.deal_reconciliation import ExtractedLink


@dataclass(frozen=True)
class LinkHarvest:
    """
    Outbound links collected from one fetched asset page.

    ``candidates`` is the subset of ``links`` the classifier flags as likely
    affiliate links.
    """

    scanned_url: str
    links: list[ExtractedLink] = field(default_factory=list)
    candidates: list[ExtractedLink] = field(default_factory=list)
