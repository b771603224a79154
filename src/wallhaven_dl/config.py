"""Configuration objects and constants for a crawl run."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError
from .urls import SEED_ALPHABET, is_absolute_http_url

DEFAULT_BASE_URL = "https://wallhaven.cc"
DEFAULT_LIMIT = 10
DEFAULT_RATE = 1.0
DEFAULT_TIMEOUT_S = 45.0

SORTING_CHOICES = (
    "date_added",
    "relevance",
    "random",
    "views",
    "favorites",
    "toplist",
    "hot",
)
ORDER_CHOICES = ("desc", "asc")

_FLAGS_RE = re.compile(r"^[01]{3}$")
_RESOLUTION_RE = re.compile(r"^\d+x\d+$")


@dataclass(frozen=True)
class SearchFilters:
    """Query filters sent with every listing request."""

    resolutions: str
    categories: str = "111"
    purity: str = "100"
    sorting: str = "random"
    order: str = "desc"

    def validate(self) -> None:
        resolutions = [r.strip() for r in self.resolutions.split(",")]
        if not self.resolutions.strip() or not all(
            _RESOLUTION_RE.match(r) for r in resolutions
        ):
            raise ConfigError(
                f"resolutions must look like 1920x1080 (comma-separated for "
                f"several), got {self.resolutions!r}"
            )
        if not _FLAGS_RE.match(self.categories):
            raise ConfigError(
                f"categories must be three 0/1 flags (general, anime, people), "
                f"got {self.categories!r}"
            )
        if not _FLAGS_RE.match(self.purity):
            raise ConfigError(
                f"purity must be three 0/1 flags (sfw, sketchy, nsfw), "
                f"got {self.purity!r}"
            )
        if self.sorting not in SORTING_CHOICES:
            raise ConfigError(
                f"sorting must be one of {', '.join(SORTING_CHOICES)}, "
                f"got {self.sorting!r}"
            )
        if self.order not in ORDER_CHOICES:
            raise ConfigError(f"order must be desc or asc, got {self.order!r}")


@dataclass
class CrawlConfig:
    """Top-level settings for one crawl-and-download run."""

    out_dir: Path
    filters: SearchFilters
    limit: int = DEFAULT_LIMIT
    requests_per_second: float = DEFAULT_RATE
    seed: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = DEFAULT_TIMEOUT_S
    write_manifest: bool = False

    def validate(self) -> None:
        """Raise ConfigError on the first invalid setting.

        Runs before any network access, so a bad configuration never costs a
        request.
        """

        self.filters.validate()

        if self.limit < 1:
            raise ConfigError(f"limit must be >= 1, got {self.limit}")
        if self.requests_per_second <= 0:
            raise ConfigError(
                f"requests per second must be > 0, got {self.requests_per_second}"
            )
        if self.timeout_s <= 0:
            raise ConfigError(f"timeout must be > 0, got {self.timeout_s}")
        if self.seed is not None and (
            not self.seed or any(ch not in SEED_ALPHABET for ch in self.seed)
        ):
            raise ConfigError(f"seed must be alphanumeric, got {self.seed!r}")
        if not is_absolute_http_url(self.base_url):
            raise ConfigError(
                f"base URL must be an absolute http(s) URL, got {self.base_url!r}"
            )

        out_dir = Path(self.out_dir)
        if not out_dir.exists():
            raise ConfigError(f"output directory does not exist: {out_dir}")
        if not out_dir.is_dir():
            raise ConfigError(f"output path is not a directory: {out_dir}")
        if not os.access(out_dir, os.W_OK):
            raise ConfigError(f"output directory is not writable: {out_dir}")
