"""Two-phase crawl: discover assets page by page, then download them."""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .config import CrawlConfig
from .errors import FetchError, MalformedAssetUrl, SourceNotFound, TransportError
from .extract import extract_asset_source, extract_listing_links
from .http_client import HttpClient
from .logs import TRACE
from .manifest import RESERVED_NAMES, RunManifest
from .models import AssetDescriptor
from .urls import build_listing_url, generate_seed

logger = logging.getLogger("wallhaven_dl.pipeline")

_LINK_ERRORS = (FetchError, TransportError, SourceNotFound, MalformedAssetUrl)
_DOWNLOAD_ERRORS = (FetchError, TransportError, OSError)


class Phase(str, Enum):
    DISCOVERING = "discovering"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class PipelineState:
    """Everything that lives for exactly one run."""

    seed: str
    manifest: RunManifest
    page: int = 1
    phase: Phase = Phase.DISCOVERING
    queue: deque[AssetDescriptor] = field(default_factory=deque)
    stats: Counter[str] = field(default_factory=Counter)
    saved: list[Path] = field(default_factory=list)


@dataclass
class RunSummary:
    seed: str
    pages: int
    queued: int
    skipped: int
    downloaded: int
    failed: int
    saved: list[Path]

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "pages": self.pages,
            "queued": self.queued,
            "skipped": self.skipped,
            "downloaded": self.downloaded,
            "failed": self.failed,
            "saved": [p.name for p in self.saved],
        }


class CrawlPipeline:
    def __init__(
        self,
        *,
        http: HttpClient,
        config: CrawlConfig,
    ) -> None:
        self.http = http
        self.cfg = config
        self.out_dir = Path(self.cfg.out_dir)
        self.seed = self.cfg.seed or generate_seed()

    def new_state(self) -> PipelineState:
        manifest = RunManifest(self.out_dir, enabled=self.cfg.write_manifest)
        return PipelineState(seed=self.seed, manifest=manifest)

    def listing_url(self, page: int) -> str:
        return build_listing_url(
            self.cfg.base_url, self.cfg.filters, seed=self.seed, page=page
        )

    def resolve_asset(self, detail_url: str) -> AssetDescriptor:
        res = self.http.fetch(detail_url)
        src = extract_asset_source(
            res.text(), page_path=res.path, page_url=res.final_url
        )
        return AssetDescriptor.from_url(src)

    def _skip(self, state: PipelineState, link: str | None, reason: str) -> None:
        state.stats["skipped"] += 1
        state.manifest.skipped(link, reason)

    def discover(self, state: PipelineState) -> None:
        """Fill the queue until the limit is reached or the listing runs out.

        Listing fetch failures propagate. Failures on a single detail page
        are logged and that link is skipped.
        """

        limit = self.cfg.limit
        while state.phase is Phase.DISCOVERING:
            url = self.listing_url(state.page)
            res = self.http.fetch(url)
            state.stats["pages"] += 1

            links = extract_listing_links(res.text(), page_url=res.final_url)
            logger.debug("Page %d: %d preview links", state.page, len(links))
            if not links:
                logger.info(
                    "Listing exhausted on page %d with %d/%d queued.",
                    state.page,
                    len(state.queue),
                    limit,
                )
                state.phase = Phase.DRAINING
                break

            for index, link in enumerate(links):
                if link is None:
                    reason = f"preview #{index} on page {state.page} has no link"
                    logger.error("Skipping %s (%s).", reason, res.path)
                    self._skip(state, None, reason)
                    continue

                logger.log(TRACE, "Resolving %s", link)
                try:
                    asset = self.resolve_asset(link)
                except _LINK_ERRORS as e:
                    logger.error("%s", e)
                    self._skip(state, link, str(e))
                    continue

                state.queue.append(asset)
                state.stats["queued"] += 1
                state.manifest.queued(asset)

                if len(state.queue) >= limit:
                    state.phase = Phase.DRAINING
                    break
            else:
                state.page += 1

        logger.info(
            "Discovery finished after %d page(s); %d wallpaper(s) queued.",
            state.stats["pages"],
            len(state.queue),
        )

    def download(
        self,
        asset: AssetDescriptor,
        *,
        manifest_names: frozenset[str] = frozenset(),
    ) -> Path:
        """Fetch the asset and move its bytes into place under its own name.

        The body goes to ``<name>.part`` first, so a failed write never leaves
        a truncated file under the real name.
        """

        dest = self.out_dir / asset.name
        if asset.name in manifest_names:
            raise FileExistsError(
                f"{asset.name} would overwrite the run manifest in {self.out_dir}"
            )

        res = self.http.fetch(asset.url)
        if dest.exists():
            logger.warning("Overwriting existing %s", dest)

        part = dest.with_name(dest.name + ".part")
        try:
            with part.open("wb") as f:
                f.write(res.body)
            part.replace(dest)
        except OSError:
            part.unlink(missing_ok=True)
            raise
        return dest

    def drain(self, state: PipelineState) -> None:
        logger.info(
            "Downloading %d wallpaper(s) to %s", len(state.queue), self.out_dir
        )
        manifest_names = RESERVED_NAMES if state.manifest.enabled else frozenset()
        while state.queue:
            asset = state.queue.popleft()
            try:
                dest = self.download(asset, manifest_names=manifest_names)
            except _DOWNLOAD_ERRORS as e:
                logger.error("Cannot download %s: %s", asset.url, e)
                state.stats["failed"] += 1
                state.manifest.download_failed(asset, e)
                continue

            state.stats["downloaded"] += 1
            if dest not in state.saved:
                state.saved.append(dest)
            logger.info("Saved %s", dest)
            state.manifest.downloaded(asset)

        state.phase = Phase.DONE
        logger.info(
            "Done: %d downloaded, %d failed.",
            state.stats["downloaded"],
            state.stats["failed"],
        )

    def run(self) -> RunSummary:
        state = self.new_state()

        logger.info(
            "Discovering wallpapers at %s (seed=%s, limit=%d)",
            self.cfg.base_url,
            state.seed,
            self.cfg.limit,
        )
        self.discover(state)
        self.drain(state)

        summary = RunSummary(
            seed=state.seed,
            pages=state.stats["pages"],
            queued=state.stats["queued"],
            skipped=state.stats["skipped"],
            downloaded=state.stats["downloaded"],
            failed=state.stats["failed"],
            saved=list(state.saved),
        )
        state.manifest.finish(
            listing_url=self.listing_url(1), summary=summary.to_dict()
        )
        return summary
