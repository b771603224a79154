"""Data models passed between the discovery and download phases."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import MalformedAssetUrl
from .urls import is_absolute_http_url


def derive_name(url: str) -> str:
    """Return the final ``/``-delimited segment of the URL path.

    Raises MalformedAssetUrl when there is no usable segment, e.g. for
    ``https://host/path/`` or ``https://host``.
    """

    path = urlparse(url).path
    name = path.rsplit("/", 1)[-1]
    if not name:
        raise MalformedAssetUrl(url, "no trailing path segment to use as a filename")
    if name in {".", ".."}:
        raise MalformedAssetUrl(url, f"{name!r} is not a usable filename")
    return name


@dataclass(frozen=True)
class AssetDescriptor:
    """A resolved, downloadable asset and the filename it is saved under."""

    url: str
    name: str

    @classmethod
    def from_url(cls, url: str) -> AssetDescriptor:
        url = url.strip()
        if not url:
            raise MalformedAssetUrl(url, "empty URL")
        if not is_absolute_http_url(url):
            raise MalformedAssetUrl(url, "not an absolute http(s) URL")
        return cls(url=url, name=derive_name(url))
