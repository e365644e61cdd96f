"""Source dispatch: pick an extractor for a URL or query and return one page."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from . import google_drive, google_photos, pinterest
from .config import CrawlConfig
from .content import TitleStrategy, alt_or_pin_label, alt_or_title, scrape_images
from .fetcher import Fetcher
from .models import Page
from .utils import host_of, normalize_source_url, parse_offset

logger = logging.getLogger("wallcrawl")


class WallpaperCrawler:
    """Stateless facade over the Pinterest, Google Photos, Drive and generic extractors.

    Instances hold only configuration and may be shared between threads; each
    :meth:`discover` call performs its own sequential HTTP round-trips.
    """

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.config = config or CrawlConfig()
        self.fetcher = fetcher or Fetcher(self.config)

    def discover(
        self,
        source: str,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        """Return one page of candidates for a URL or a free-text Pinterest query.

        ``cursor`` must be ``None`` or a value previously returned as
        ``next_cursor`` for the same source. ``token`` is an opaque bearer
        token forwarded to Google sources. Upstream failures produce an empty
        page; only a non-positive ``limit`` raises.
        """
        if limit is None:
            limit = self.config.default_limit
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")
        source = (source or "").strip()
        if not source:
            return Page()
        if cursor is not None and not cursor.strip():
            cursor = None

        if pinterest.is_pinterest_cursor(cursor):
            decoded = pinterest.PinterestCursor.decode(
                cursor, self.config.pinterest_default_page_size
            )
            if decoded is None:
                logger.debug("Discarding malformed Pinterest cursor for %s", source)
                return Page()
            page = self._guard(
                source, lambda: pinterest.fetch_continuation(self.fetcher, decoded)
            )
            return page or Page()

        url = normalize_source_url(source)
        if url is None:
            logger.info("Searching Pinterest for %r", source)
            return self._generic(pinterest.search_url(source), limit, cursor, alt_or_pin_label)

        page = self._specialized(url, limit, cursor, token)
        if page is not None:
            return page
        return self._generic(url, limit, cursor, alt_or_title)

    def _specialized(
        self, url: str, limit: int, cursor: Optional[str], token: Optional[str]
    ) -> Optional[Page]:
        host = host_of(url)
        offset = parse_offset(cursor)
        if pinterest.is_pinterest_host(host):
            if cursor is not None:
                return None
            return self._guard(
                url, lambda: pinterest.fetch_initial_page(self.fetcher, url, limit)
            )
        if google_photos.is_photos_host(host):
            return self._guard(
                url,
                lambda: google_photos.scrape_album(
                    self.fetcher,
                    url,
                    limit,
                    offset,
                    token=token,
                    size_directive=self.config.photos_size_directive,
                ),
            )
        if google_drive.is_drive_host(host):
            return self._guard(
                url,
                lambda: google_drive.scrape_folder(
                    self.fetcher, url, limit, offset, token=token
                ),
            )
        return None

    def _generic(
        self,
        url: str,
        limit: int,
        cursor: Optional[str],
        title_for: TitleStrategy,
    ) -> Page:
        page = self._guard(
            url, lambda: scrape_images(self.fetcher, url, limit, cursor, title_for)
        )
        return page or Page()

    @staticmethod
    def _guard(url: str, extract: Callable[[], Optional[Page]]) -> Optional[Page]:
        try:
            return extract()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error extracting images from %s", url)
            return None


def discover(
    source: str,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    token: Optional[str] = None,
    config: Optional[CrawlConfig] = None,
) -> Page:
    """Convenience wrapper building a crawler from ``config`` or the environment."""
    crawler = WallpaperCrawler(config or CrawlConfig.from_env())
    return crawler.discover(source, limit=limit, cursor=cursor, token=token)
