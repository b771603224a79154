from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest

from wallhaven_dl.config import CrawlConfig, SearchFilters
from wallhaven_dl.http_client import HttpClient
from wallhaven_dl.ratelimit import TokenBucket

BASE_URL = "https://wallhaven.cc"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class FakeResponse:
    url: str
    status_code: int = 200
    content: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def listing_html(hrefs: list[str | None]) -> str:
    cards = []
    for i, href in enumerate(hrefs):
        if href is None:
            cards.append(f'<a class="preview" data-id="{i}"></a>')
        else:
            cards.append(f'<figure><a class="preview" href="{href}"></a></figure>')
    return "<html><body><section>" + "".join(cards) + "</section></body></html>"


def detail_html(src: str | None) -> str:
    if src is None:
        return "<html><body><main><p>gone</p></main></body></html>"
    return (
        '<html><body><main><img id="wallpaper" '
        f'data-cfsrc="{src}" alt="wallpaper"></main></body></html>'
    )


class FakeSite:
    """Stands in for requests.Session; serves listing, detail and asset URLs."""

    def __init__(self) -> None:
        self.listings: dict[int, object] = {}
        self.routes: dict[str, object] = {}
        self.calls: list[str] = []
        self.timeouts: list[object] = []

    def add_wallpaper(
        self,
        wid: str,
        *,
        body: bytes | None = None,
        asset_url: str | None = None,
    ) -> str:
        detail_url = f"{BASE_URL}/w/{wid}"
        if asset_url is None:
            asset_url = f"https://w.wallhaven.cc/full/{wid[:2]}/wallhaven-{wid}.jpg"
        self.routes[detail_url] = detail_html(asset_url)
        self.routes[asset_url] = body if body is not None else f"img-{wid}".encode()
        return detail_url

    def listing_calls(self) -> list[dict[str, list[str]]]:
        return [
            parse_qs(urlparse(u).query)
            for u in self.calls
            if urlparse(u).path == "/search"
        ]

    def _respond(self, url: str, target: object) -> FakeResponse:
        if isinstance(target, Exception):
            raise target
        if isinstance(target, FakeResponse):
            return target
        if isinstance(target, str):
            return FakeResponse(url, 200, target.encode("utf-8"))
        if isinstance(target, bytes):
            return FakeResponse(url, 200, target)
        return FakeResponse(url, 404, b"not found")

    def get(self, url: str, timeout=None, headers=None) -> FakeResponse:
        self.calls.append(url)
        self.timeouts.append(timeout)
        parsed = urlparse(url)
        if parsed.path == "/search":
            page = int(parse_qs(parsed.query)["page"][0])
            return self._respond(url, self.listings.get(page, listing_html([])))
        return self._respond(url, self.routes.get(url))

    def close(self) -> None:
        pass


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> TokenBucket:
    return TokenBucket(interval_s=1.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def http(site: FakeSite, limiter: TokenBucket) -> HttpClient:
    return HttpClient(site, limiter=limiter, timeout_s=10)  # type: ignore[arg-type]


@pytest.fixture
def make_config(tmp_path: Path):
    def _make(**overrides) -> CrawlConfig:
        params = {
            "out_dir": tmp_path,
            "filters": SearchFilters(resolutions="1920x1080"),
            "limit": 10,
            "seed": "abc123",
            "base_url": BASE_URL,
        }
        params.update(overrides)
        return CrawlConfig(**params)

    return _make
