from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

import requests
from requests import exceptions as req_exc

from .errors import FetchError, TransportError
from .ratelimit import TokenBucket
from .urls import normalize_url

logger = logging.getLogger("wallhaven_dl.http")


@dataclass(frozen=True)
class FetchResult:
    url: str
    final_url: str
    body: bytes

    @property
    def path(self) -> str:
        return urlparse(self.final_url).path or "/"

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpClient:
    """The only place this package talks to the network.

    Every call to fetch() consumes one limiter token before the request is
    sent, so failed requests count against the rate budget too.
    """

    def __init__(
        self,
        session: requests.Session,
        *,
        limiter: TokenBucket,
        timeout_s: float = 45,
    ) -> None:
        self._session = session
        self._limiter = limiter
        self._timeout_s = timeout_s

    def fetch(self, url: str) -> FetchResult:
        normalized = normalize_url(url)

        waited = self._limiter.acquire()
        if waited:
            logger.debug("Rate limiter held %s for %.2fs", normalized, waited)

        try:
            resp = self._session.get(normalized, timeout=self._timeout_s)
        except req_exc.RequestException as e:
            raise TransportError(normalized, e) from e

        final_url = str(resp.url or normalized)
        path = urlparse(final_url).path or "/"
        status = int(resp.status_code)
        if not 200 <= status < 300:
            raise FetchError(path, status)

        logger.debug('Successfully downloaded "%s" (%d).', path, status)
        return FetchResult(url=normalized, final_url=final_url, body=resp.content)
