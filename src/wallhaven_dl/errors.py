from __future__ import annotations


class WallhavenError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(WallhavenError, ValueError):
    pass


class FetchError(WallhavenError):
    """Non-2xx HTTP response."""

    def __init__(self, path: str, status_code: int) -> None:
        super().__init__(
            f'Cannot fetch the page "{path}" with status code {status_code}.'
        )
        self.path = path
        self.status_code = status_code


class TransportError(WallhavenError):
    """Connection, DNS or timeout failure before any response arrived."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class SourceNotFound(WallhavenError):
    def __init__(self, path: str) -> None:
        super().__init__(f'Cannot find the wallpaper source from "{path}".')
        self.path = path


class MalformedAssetUrl(WallhavenError, ValueError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Malformed asset URL {url!r}: {reason}")
        self.url = url
        self.reason = reason
