from __future__ import annotations

import argparse
import sys
from pathlib import Path

import requests

from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_LIMIT,
    DEFAULT_RATE,
    DEFAULT_TIMEOUT_S,
    ORDER_CHOICES,
    SORTING_CHOICES,
    CrawlConfig,
    SearchFilters,
)
from .errors import ConfigError, FetchError, TransportError
from .http_client import HttpClient
from .logs import configure_logging
from .pipeline import CrawlPipeline
from .ratelimit import TokenBucket

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_CONFIG = 2
EXIT_CRAWL = 3


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wallhaven-dl",
        description=(
            "Page through a wallpaper search, resolve each result to its "
            "full-size image and download the images, one request at a time."
        ),
    )
    p.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Existing, writable directory the wallpapers are saved into",
    )
    p.add_argument(
        "--resolutions",
        required=True,
        help="Exact resolution filter, e.g. 1920x1080 (comma-separate several)",
    )
    p.add_argument(
        "--categories",
        default="111",
        help="Three 0/1 flags: general, anime, people (default: 111)",
    )
    p.add_argument(
        "--purity",
        default="100",
        help="Three 0/1 flags: sfw, sketchy, nsfw (default: 100)",
    )
    p.add_argument("--sorting", default="random", choices=SORTING_CHOICES)
    p.add_argument("--order", default="desc", choices=ORDER_CHOICES)
    p.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help="Maximum number of wallpapers to download",
    )
    p.add_argument(
        "--rate",
        type=float,
        default=DEFAULT_RATE,
        help="Requests per second across the whole run",
    )
    p.add_argument(
        "--seed",
        default=None,
        help="Fixed seed for random sorting (default: a new one per run)",
    )
    p.add_argument("--base-url", default=DEFAULT_BASE_URL)
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_S)
    p.add_argument(
        "--manifest",
        action="store_true",
        help="Write manifest.jsonl/manifest.json for this run into --out",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=1,
        help="Repeatable; -v for debug, -vv for trace",
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report errors",
    )
    return p


def config_from_args(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig(
        out_dir=args.out,
        filters=SearchFilters(
            resolutions=args.resolutions,
            categories=args.categories,
            purity=args.purity,
            sorting=args.sorting,
            order=args.order,
        ),
        limit=int(args.limit),
        requests_per_second=float(args.rate),
        seed=args.seed,
        base_url=args.base_url,
        timeout_s=float(args.timeout),
        write_manifest=bool(args.manifest),
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(0 if args.quiet else int(args.verbose))

    config = config_from_args(args)
    try:
        config.validate()
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return EXIT_CONFIG

    session = requests.Session()
    http = HttpClient(
        session,
        limiter=TokenBucket.per_second(config.requests_per_second),
        timeout_s=config.timeout_s,
    )
    pipeline = CrawlPipeline(http=http, config=config)
    try:
        summary = pipeline.run()
    except (FetchError, TransportError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_CRAWL
    finally:
        session.close()

    print(
        f"wallhaven-dl: seed={summary.seed} pages={summary.pages} "
        f"queued={summary.queued} skipped={summary.skipped} "
        f"downloaded={summary.downloaded} failed={summary.failed}"
    )
    if summary.failed:
        return EXIT_PARTIAL
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
