"""
Domain/URL normalization shared by extraction and matching.
"""

from __future__ import annotations

import re

_SCHEME_PREFIX = re.compile(r"^https?://")
_WWW_PREFIX = re.compile(r"^www\.")
_TRAILING_SLASHES = re.compile(r"/+$")


def normalize_domain(value: str) -> str:
    """
    Canonicalize a domain or URL into a comparable form.

    Trims whitespace, lowercases, then strips one leading ``http://`` or
    ``https://``, one leading ``www.`` and any trailing slashes. Never raises;
    malformed input simply comes back minus the stripped parts.
    """

    normalized = value.strip().lower()
    normalized = _SCHEME_PREFIX.sub("", normalized, count=1)
    normalized = _WWW_PREFIX.sub("", normalized, count=1)
    return _TRAILING_SLASHES.sub("", normalized)


def is_same_site(domain: str, reference: str) -> bool:
    """
    True when ``domain`` equals ``reference`` or is a dot-suffix subdomain of it.

    ``a.b.com`` matches ``b.com``; ``ab.com`` does not.
    """

    candidate = normalize_domain(domain)
    target = normalize_domain(reference)
    if not candidate or not target:
        return False
    return candidate == target or candidate.endswith(f".{target}")
