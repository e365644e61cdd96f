"""Command-line entry point for running discovery against a single source."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Sequence

from .config import CrawlConfig
from .crawler import WallpaperCrawler

logger = logging.getLogger("wallcrawl.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Discover wallpaper candidates from a web page, Pinterest, "
        "Google Photos or Google Drive, or search Pinterest by keyword.",
    )
    parser.add_argument("source", help="URL to scan, or free text to search Pinterest")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of candidates per page (default: 30)",
    )
    parser.add_argument(
        "--cursor",
        default=None,
        help="Resume from a next_cursor printed by a previous run",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Follow next_cursor for up to this many pages",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Bearer token forwarded to Google Photos / Drive requests",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)
    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be positive")
    if args.pages < 1:
        parser.error("--pages must be positive")
    return args


def run(args: argparse.Namespace) -> int:
    config = CrawlConfig.from_env()
    if args.timeout is not None:
        config = replace(config, timeout=args.timeout)
    crawler = WallpaperCrawler(config)

    cursor = args.cursor
    total = 0
    for page_number in range(1, args.pages + 1):
        page = crawler.discover(
            args.source, limit=args.limit, cursor=cursor, token=args.token
        )
        total += len(page.items)
        sys.stdout.write(json.dumps(page.to_dict(), ensure_ascii=False) + "\n")
        logger.debug(
            "Page %d: %d items, next cursor %s",
            page_number,
            len(page.items),
            page.next_cursor,
        )
        cursor = page.next_cursor
        if cursor is None:
            break
    sys.stdout.flush()
    logger.info("Discovered %d candidates from %s", total, args.source)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
