"""
tests/test_page_fetcher.py

Page fetch limits: the timeout bounds the whole request and the body size
is capped.
"""

from __future__ import annotations

import time

import pytest

from app.config import DealScanSettings
from app.domain.errors import FetchFailure
from app.scanning.fetcher import PageFetcher


def _fetcher(fake_http, **overrides) -> PageFetcher:
    settings = DealScanSettings(user_agent="TestScanner/1.0", **overrides)
    return PageFetcher(settings=settings, session=fake_http)  # type: ignore[arg-type]


def test_small_page_is_returned_and_response_closed(fake_http) -> None:
    fake_http.html = '<a href="https://aff.acme.com/go?btag=5">Play</a>'

    body = _fetcher(fake_http, timeout_seconds=5.0).fetch("https://site.com")

    assert body == fake_http.html
    assert fake_http.responses[0].closed


def test_slow_drip_body_is_aborted_at_the_deadline(fake_http) -> None:
    # 40 chunks at 0.05s each would take two seconds.
    fake_http.chunks = [b"<p>x</p>"] * 40
    fake_http.delay = 0.05
    fetcher = _fetcher(fake_http, timeout_seconds=0.3)

    started = time.monotonic()
    with pytest.raises(FetchFailure) as excinfo:
        fetcher.fetch("https://site.com")
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert excinfo.value.message == "Timed out fetching asset website."
    assert excinfo.value.details["url"] == "https://site.com"
    assert fake_http.responses[0].closed


def test_oversized_body_is_rejected(fake_http) -> None:
    fake_http.chunks = [b"x" * 600] * 3

    with pytest.raises(FetchFailure) as excinfo:
        _fetcher(fake_http, timeout_seconds=5.0, max_page_bytes=1024).fetch("https://site.com")

    assert excinfo.value.details["max_bytes"] == 1024
    assert fake_http.responses[0].closed


def test_body_is_decoded_with_response_encoding(fake_http) -> None:
    fake_http.chunks = ["<p>Café</p>".encode("latin-1")]
    fake_http.encoding = "ISO-8859-1"

    assert _fetcher(fake_http, timeout_seconds=5.0).fetch("https://site.com") == "<p>Café</p>"


def test_missing_encoding_falls_back_to_utf8(fake_http) -> None:
    fake_http.chunks = ["<p>Café</p>".encode("utf-8")]
    fake_http.encoding = None

    assert _fetcher(fake_http, timeout_seconds=5.0).fetch("https://site.com") == "<p>Café</p>"
