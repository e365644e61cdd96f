"""Public Google Drive folders read through the embeddable folder view."""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup

from .fetcher import FetchError, Fetcher, bearer_headers
from .models import Page, WallpaperCandidate
from .utils import paginate

logger = logging.getLogger("wallcrawl.google_drive")

DRIVE_HOST = "drive.google.com"
EMBED_URL = "https://drive.google.com/embeddedfolderview?id={folder_id}"
DIRECT_VIEW_URL = "https://drive.google.com/uc?export=view&id={file_id}"
FILE_VIEW_URL = "https://drive.google.com/file/d/{file_id}/view"

_ID = r"[A-Za-z0-9_-]+"
_FOLDER_PATH = re.compile(rf"/folders/({_ID})")
_FILE_PATH = re.compile(rf"/file/d/({_ID})")
_VALID_ID = re.compile(rf"^{_ID}$")


def is_drive_host(host: str) -> bool:
    return host == DRIVE_HOST


def parse_folder_id(url: str) -> Optional[str]:
    """Folder id from a ``/folders/{id}`` path or an ``id=`` query parameter."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    match = _FOLDER_PATH.search(parsed.path)
    if match:
        return match.group(1)
    for value in parse_qs(parsed.query).get("id", []):
        if _VALID_ID.match(value):
            return value
    return None


def extract_files(html_text: str) -> List[WallpaperCandidate]:
    """Image files listed in an embedded folder view, in listing order."""
    soup = BeautifulSoup(html_text, "html.parser")
    seen = set()
    files: List[WallpaperCandidate] = []
    for anchor in soup.find_all("a", href=True):
        match = _FILE_PATH.search(anchor["href"])
        if not match or anchor.find("img") is None:
            continue
        file_id = match.group(1)
        if file_id in seen:
            continue
        seen.add(file_id)
        title = (
            (anchor.get("title") or "").strip()
            or anchor.get_text(" ", strip=True)
            or f"Drive image {len(files) + 1}"
        )
        files.append(
            WallpaperCandidate(
                id=file_id,
                title=title,
                image_url=DIRECT_VIEW_URL.format(file_id=file_id),
                source_url=FILE_VIEW_URL.format(file_id=file_id),
            )
        )
    return files


def scrape_folder(
    fetcher: Fetcher,
    folder_url: str,
    limit: int,
    offset: int = 0,
    token: Optional[str] = None,
) -> Optional[Page]:
    """Page through a folder; None when the URL names no folder or fetch fails."""
    folder_id = parse_folder_id(folder_url)
    if folder_id is None:
        logger.debug("No folder id in %s", folder_url)
        return None
    embed_url = EMBED_URL.format(folder_id=folder_id)
    try:
        fetched = fetcher.fetch_page(embed_url, headers=bearer_headers(token))
    except FetchError as exc:
        logger.warning("Failed to fetch Drive folder %s: %s", folder_id, exc)
        return None
    return paginate(extract_files(fetched.text), offset, limit)
