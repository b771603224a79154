from __future__ import annotations

import secrets
import string
from typing import TYPE_CHECKING
from urllib.parse import ParseResult, urlencode, urljoin, urlparse, urlunparse

from .errors import ConfigError

if TYPE_CHECKING:
    from .config import SearchFilters

SEED_ALPHABET = string.ascii_letters + string.digits
SEED_LENGTH = 6


def normalize_url(raw_url: str) -> str:
    """Normalize a URL before it is requested.

    - Lowercases scheme + hostname.
    - Strips fragments.
    """

    parsed: ParseResult = urlparse(raw_url.strip())
    parsed = parsed._replace(
        scheme=(parsed.scheme or "").lower(),
        netloc=(parsed.netloc or "").lower(),
        fragment="",
    )
    return urlunparse(parsed)


def is_absolute_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def resolve_href(href: str, *, base_url: str | None) -> str:
    href = href.strip()
    if base_url:
        href = urljoin(base_url, href)
    return href


def generate_seed(length: int = SEED_LENGTH) -> str:
    """Random token that pins the server's random ordering for one run."""
    return "".join(secrets.choice(SEED_ALPHABET) for _ in range(length))


def build_listing_url(
    base_url: str,
    filters: SearchFilters,
    *,
    seed: str,
    page: int,
) -> str:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if not is_absolute_http_url(base_url):
        raise ConfigError(f"base URL must be an absolute http(s) URL: {base_url!r}")

    query = urlencode(
        [
            ("categories", filters.categories),
            ("purity", filters.purity),
            ("resolutions", filters.resolutions),
            ("sorting", filters.sorting),
            ("order", filters.order),
            ("seed", seed),
            ("page", str(page)),
        ]
    )
    search = urljoin(base_url.rstrip("/") + "/", "search")
    return normalize_url(f"{search}?{query}")
