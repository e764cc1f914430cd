"""
Heuristic affiliate/tracking link detection.

The pattern list is a cheap pre-filter in front of the brand and deal
matchers. Missed affiliate links surface later as Missing items and false
positives as NewUnmatched items, so precision is tuned loosely.
"""

from __future__ import annotations

import re

AFFILIATE_LINK_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, flags=re.IGNORECASE)
    for pattern in (
        r"track\.",
        r"click\.",
        r"go\.",
        r"redirect\.",
        r"redir\.",
        r"aff\.",
        r"affiliate",
        r"[?&]btag=",
        r"[?&]stag=",
        r"[?&]ref=",
        r"[?&]affid=",
        r"[?&]aff_id=",
        r"[?&]clickid=",
        r"[?&]click_id=",
        r"[?&]tracker=",
        r"[?&]campaign=",
        r"[?&]source=",
        r"[?&]utm_",
        r"[?&]pid=",
        r"[?&]mid=",
        r"[?&]sid=",
        r"partners\.",
        r"tracking\.",
        r"offer",
        r"promo",
    )
)


def is_likely_affiliate_link(
    url: str,
    patterns: tuple[re.Pattern[str], ...] = AFFILIATE_LINK_PATTERNS,
) -> bool:
    """
    Return True on the first pattern that matches the raw URL.
    """

    return any(pattern.search(url) for pattern in patterns)
