"""
tests/test_link_extractor.py

Pure tests for outbound anchor extraction.
"""

from __future__ import annotations

from app.scanning.link_extractor import extract_links


def test_keeps_only_external_navigational_links() -> None:
    html = """
    <a href="/about">About</a>
    <a href="#top">Top</a>
    <a href="mailto:hi@site.com">Mail</a>
    <a href="javascript:void(0)">JS</a>
    <a href="https://site.com/news">News</a>
    <a href="https://blog.site.com/post">Blog</a>
    <a href="https://aff.acme.com/go?btag=5">Play</a>
    """

    links = extract_links(html, "site.com")

    assert [link.url for link in links] == ["https://aff.acme.com/go?btag=5"]
    assert links[0].domain == "aff.acme.com"
    assert links[0].anchor == "Play"


def test_protocol_relative_links_resolve_to_https() -> None:
    links = extract_links('<a href="//track.example.com/x">Go</a>', "site.com")

    assert links[0].url == "https://track.example.com/x"


def test_deduplicates_by_url_keeping_first_anchor() -> None:
    html = """
    <a href="https://go.casino.com/r">First</a>
    <a href="https://go.casino.com/r">Second</a>
    <a href="https://go.casino.com/r?x=1">Third</a>
    """

    links = extract_links(html, "site.com")

    assert [link.anchor for link in links] == ["First", "Third"]


def test_anchor_text_strips_markup_and_collapses_whitespace() -> None:
    html = '<a href="https://promo.brand.com/"> <b>Claim</b>\n   <span>bonus</span> </a>'

    links = extract_links(html, "site.com")

    assert links[0].anchor == "Claim bonus"


def test_unparsable_and_hostless_hrefs_are_dropped() -> None:
    html = """
    <a href="http://[::1">Broken</a>
    <a href="https://">Empty</a>
    <a href="  https://ok.example.com/offer  ">Ok</a>
    """

    links = extract_links(html, "site.com")

    assert [link.url for link in links] == ["https://ok.example.com/offer"]


def test_www_prefixed_host_is_treated_as_the_asset() -> None:
    links = extract_links('<a href="https://WWW.Site.com/promo">Self</a>', "site.com")

    assert links == []
