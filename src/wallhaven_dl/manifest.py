"""Optional per-run record of what was queued, skipped and saved."""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .models import AssetDescriptor

EVENTS_FILENAME = "manifest.jsonl"
SUMMARY_FILENAME = "manifest.json"
RESERVED_NAMES = frozenset({EVENTS_FILENAME, SUMMARY_FILENAME})


def _now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass(frozen=True)
class RunEvent:
    kind: str
    url: str | None
    name: str | None = None
    error: str | None = None
    at: str = field(default_factory=_now)

    def to_json(self) -> str:
        fields = {k: v for k, v in asdict(self).items() if v is not None}
        return json.dumps(fields, ensure_ascii=False)


class RunManifest:
    """Events for one run go to manifest.jsonl; the summary to manifest.json.

    A disabled manifest accepts every call and writes nothing.
    """

    def __init__(self, out_dir: Path, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self.events_path = out_dir / EVENTS_FILENAME
        self.summary_path = out_dir / SUMMARY_FILENAME
        self.started_at = _now()

    def _emit(self, event: RunEvent) -> None:
        if not self.enabled:
            return
        with self.events_path.open("a", encoding="utf-8", newline="\n") as f:
            f.write(event.to_json() + "\n")

    def queued(self, asset: AssetDescriptor) -> None:
        self._emit(RunEvent("queued", asset.url, name=asset.name))

    def skipped(self, link: str | None, reason: str) -> None:
        self._emit(RunEvent("skipped", link, error=reason))

    def downloaded(self, asset: AssetDescriptor) -> None:
        self._emit(RunEvent("downloaded", asset.url, name=asset.name))

    def download_failed(self, asset: AssetDescriptor, error: Exception) -> None:
        self._emit(
            RunEvent("download_failed", asset.url, name=asset.name, error=str(error))
        )

    def finish(self, *, listing_url: str, summary: dict[str, Any]) -> None:
        if not self.enabled:
            return
        payload = {
            "started_at": self.started_at,
            "finished_at": _now(),
            "listing": listing_url,
            **summary,
        }
        self.summary_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
