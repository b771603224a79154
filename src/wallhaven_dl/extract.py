from __future__ import annotations

from bs4 import BeautifulSoup

from .errors import SourceNotFound
from .urls import resolve_href

PREVIEW_CLASS = "preview"
WALLPAPER_ID = "wallpaper"
SOURCE_ATTR = "data-cfsrc"


def _attr_text(val: object) -> str:
    if isinstance(val, list):
        if not val:
            return ""
        return str(val[0])
    return str(val or "")


def extract_listing_links(
    html: str,
    *,
    page_url: str | None = None,
) -> list[str | None]:
    """Return the href of every preview card, in document order.

    A card without a usable href yields None in its slot so the caller can
    report it and move on.
    """

    soup = BeautifulSoup(html, "html.parser")
    out: list[str | None] = []
    for node in soup.find_all(class_=PREVIEW_CLASS):
        href = _attr_text(node.get("href")).strip()
        if not href or href.startswith("#"):
            out.append(None)
            continue
        out.append(resolve_href(href, base_url=page_url))
    return out


def extract_asset_source(
    html: str,
    *,
    page_path: str,
    page_url: str | None = None,
) -> str:
    """Return the full-size image URL from a detail page.

    Raises SourceNotFound when the image element or its source attribute is
    missing, which happens when the page layout changes or the image did not
    render.
    """

    soup = BeautifulSoup(html, "html.parser")
    node = soup.find(id=WALLPAPER_ID)
    if node is None:
        raise SourceNotFound(page_path)
    src = _attr_text(node.get(SOURCE_ATTR)).strip()
    if not src:
        raise SourceNotFound(page_path)
    return resolve_href(src, base_url=page_url)
