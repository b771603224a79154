from __future__ import annotations

import pytest

from wallhaven_dl.errors import SourceNotFound
from wallhaven_dl.extract import extract_asset_source, extract_listing_links

from .conftest import detail_html, listing_html


def test_listing_links_keep_document_order():
    html = listing_html(["https://x/a", "https://x/b", "https://x/c"])

    assert extract_listing_links(html) == ["https://x/a", "https://x/b", "https://x/c"]


def test_listing_links_only_use_preview_cards():
    html = """
    <ul>
      <li><a class="thumb-info" href="https://x/info">i</a></li>
      <li><a class="preview" href="https://x/a">a</a></li>
      <li><a href="https://x/plain">p</a></li>
      <li><a class="jsAnchor preview" href="https://x/b">b</a></li>
    </ul>
    """

    assert extract_listing_links(html) == ["https://x/a", "https://x/b"]


def test_preview_without_href_yields_none_in_place():
    html = listing_html(["https://x/a", None, "https://x/c"])

    assert extract_listing_links(html) == ["https://x/a", None, "https://x/c"]


def test_relative_links_resolve_against_page_url():
    html = '<a class="preview" href="/w/abc123"></a>'

    links = extract_listing_links(html, page_url="https://wallhaven.cc/search?page=2")

    assert links == ["https://wallhaven.cc/w/abc123"]


def test_page_without_previews_is_empty():
    assert extract_listing_links("<html><body>No results</body></html>") == []
    assert extract_listing_links("") == []


def test_asset_source_is_read_from_wallpaper_element():
    html = detail_html("https://w.wallhaven.cc/full/ab/wallhaven-abc123.jpg")

    assert (
        extract_asset_source(html, page_path="/w/abc123")
        == "https://w.wallhaven.cc/full/ab/wallhaven-abc123.jpg"
    )


def test_asset_source_missing_element_raises_source_not_found():
    with pytest.raises(SourceNotFound) as exc_info:
        extract_asset_source(detail_html(None), page_path="/w/abc123")

    assert exc_info.value.path == "/w/abc123"
    assert "/w/abc123" in str(exc_info.value)


@pytest.mark.parametrize(
    "html",
    [
        '<img id="wallpaper" src="https://w.wallhaven.cc/full/ab/x.jpg">',
        '<img id="wallpaper" data-cfsrc="   ">',
        '<div id="wallpaper"',
        "<<<not html at all",
    ],
)
def test_asset_source_malformed_markup_raises_source_not_found(html):
    with pytest.raises(SourceNotFound):
        extract_asset_source(html, page_path="/w/broken")


def test_asset_source_resolves_protocol_relative_url():
    html = '<img id="wallpaper" data-cfsrc="//w.wallhaven.cc/full/ab/x.png">'

    src = extract_asset_source(
        html, page_path="/w/ab", page_url="https://wallhaven.cc/w/ab"
    )

    assert src == "https://w.wallhaven.cc/full/ab/x.png"
