"""Shared Google Photos albums scraped for hosted image URLs."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from .fetcher import FetchError, Fetcher, bearer_headers
from .models import Page, WallpaperCandidate
from .utils import paginate, stable_id

logger = logging.getLogger("wallcrawl.google_photos")

DEFAULT_SIZE_DIRECTIVE = "=w4096-h4096"
PHOTOS_HOSTS = ("photos.google.com", "photos.app.goo.gl")
ASSET_URL_PATTERN = re.compile(
    r"https://lh\d+\.googleusercontent\.com/[A-Za-z0-9_\-/]+(?:=[A-Za-z0-9_\-]*)?"
)
_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")
_SIZE_SUFFIX = re.compile(r"=[^/]*$")
_MARKER_SUFFIX = re.compile(r"-(?:no|rw)$")
# Profile pictures of album contributors, not album content.
_AVATAR_PREFIXES = ("/a/", "/a-/")


def is_photos_host(host: str) -> bool:
    return host in PHOTOS_HOSTS


def _decode_escapes(text: str) -> str:
    text = _UNICODE_ESCAPE.sub(lambda match: chr(int(match.group(1), 16)), text)
    return text.replace("\\/", "/").replace("&amp;", "&")


def canonicalize(url: str, size_directive: str = DEFAULT_SIZE_DIRECTIVE) -> str:
    """Drop any size/format suffix and request a large fixed rendition."""
    base = url.split("?", 1)[0]
    base = _SIZE_SUFFIX.sub("", base)
    base = _MARKER_SUFFIX.sub("", base)
    return base + size_directive


def extract_image_urls(html_text: str, size_directive: str = DEFAULT_SIZE_DIRECTIVE) -> List[str]:
    """Canonical asset URLs in first-seen order, without duplicates."""
    ordered = {}
    for match in ASSET_URL_PATTERN.finditer(_decode_escapes(html_text)):
        raw = match.group(0)
        path = raw.split(".googleusercontent.com", 1)[1]
        if path.startswith(_AVATAR_PREFIXES):
            continue
        ordered.setdefault(canonicalize(raw, size_directive), None)
    return list(ordered)


def scrape_album(
    fetcher: Fetcher,
    album_url: str,
    limit: int,
    offset: int = 0,
    token: Optional[str] = None,
    size_directive: str = DEFAULT_SIZE_DIRECTIVE,
) -> Optional[Page]:
    """Page through an album; None when nothing usable was found."""
    try:
        fetched = fetcher.fetch_page(album_url, headers=bearer_headers(token))
    except FetchError as exc:
        logger.warning("Failed to fetch Google Photos album %s: %s", album_url, exc)
        return None

    urls = extract_image_urls(fetched.text, size_directive)
    if not urls:
        logger.debug("No Google Photos assets found on %s", album_url)
        return None
    candidates = [
        WallpaperCandidate(
            id=stable_id(url),
            title=f"Google Photos image {index}",
            image_url=url,
            source_url=album_url,
        )
        for index, url in enumerate(urls, start=1)
    ]
    return paginate(candidates, offset, limit)
