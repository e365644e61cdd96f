"""Generic HTML image extraction with an offset-based cursor."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .fetcher import FetchError, Fetcher
from .models import Page, WallpaperCandidate
from .utils import (
    has_supported_extension,
    is_http_url,
    paginate,
    parse_offset,
    resolve_url,
    stable_id,
)

logger = logging.getLogger("wallcrawl")

IMAGE_ATTRIBUTES = ("src", "data-src", "data-lazy-src", "data-original", "data-actualsrc")
IMAGE_SELECTOR = ", ".join(f"img[{attr}]" for attr in IMAGE_ATTRIBUTES)
DEFAULT_TITLE = "Wallpaper"

TitleStrategy = Callable[[Tag], str]


def alt_or_title(element: Tag) -> str:
    """Alt text first, else the element's own title attribute."""
    return (element.get("alt") or "").strip() or (element.get("title") or "").strip()


def alt_or_pin_label(element: Tag) -> str:
    return (element.get("alt") or "").strip() or "Pinterest Pin"


def _document_base(soup: BeautifulSoup, page_url: str) -> str:
    base = soup.find("base", href=True)
    if base is not None:
        resolved = resolve_url(page_url, base["href"])
        if resolved and is_http_url(resolved):
            return resolved
    return page_url


def _image_url(element: Tag, base_url: str) -> Optional[str]:
    for attribute in IMAGE_ATTRIBUTES:
        resolved = resolve_url(base_url, element.get(attribute))
        if resolved:
            return resolved.replace("&amp;", "&")
    return None


def extract_candidates(
    html: str,
    page_url: str,
    max_items: int,
    title_for: TitleStrategy = alt_or_title,
) -> List[WallpaperCandidate]:
    """Collect up to ``max_items`` unique image candidates in document order."""
    soup = BeautifulSoup(html, "html.parser")
    base_url = _document_base(soup, page_url)
    seen = set()
    results: List[WallpaperCandidate] = []

    for element in soup.select(IMAGE_SELECTOR):
        if len(results) >= max_items:
            break
        image_url = _image_url(element, base_url)
        if not image_url or not is_http_url(image_url):
            continue
        if not has_supported_extension(image_url) or image_url in seen:
            continue
        seen.add(image_url)

        anchor = element.find_parent("a", href=True)
        source_url = page_url
        anchor_title = ""
        if anchor is not None:
            href = resolve_url(base_url, anchor["href"])
            if href and is_http_url(href):
                source_url = href
            anchor_title = (anchor.get("title") or "").strip()

        title = title_for(element).strip() or anchor_title or DEFAULT_TITLE
        results.append(
            WallpaperCandidate(
                id=stable_id(image_url),
                title=title,
                image_url=image_url,
                source_url=source_url,
            )
        )
    return results


def scrape_images(
    fetcher: Fetcher,
    page_url: str,
    limit: int,
    cursor: Optional[str] = None,
    title_for: TitleStrategy = alt_or_title,
) -> Page:
    """Fetch ``page_url`` and return the page of images starting at ``cursor``.

    The page is re-fetched and re-scanned on every call; the cursor is the
    number of candidates already handed out. One extra candidate is collected
    to tell whether another page exists.
    """
    offset = parse_offset(cursor)
    try:
        fetched = fetcher.fetch_page(page_url)
    except FetchError as exc:
        logger.warning("Failed to fetch %s: %s", page_url, exc)
        return Page()

    candidates = extract_candidates(
        fetched.text, fetched.url, offset + limit + 1, title_for
    )
    logger.debug("Found %d image candidates on %s", len(candidates), fetched.url)
    return paginate(candidates, offset, limit)
