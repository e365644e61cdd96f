"""Utility helpers for URL normalization and offset pagination."""

from __future__ import annotations

import hashlib
import re
from typing import Optional, Sequence
from urllib.parse import urljoin, urlparse

from .models import Page, WallpaperCandidate

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_HOST_PATTERN = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)+$", re.IGNORECASE)


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def has_supported_extension(url: str) -> bool:
    """Return True when the URL path ends with an allow-listed image extension."""
    path = url.split("#", 1)[0].split("?", 1)[0].lower()
    return path.endswith(SUPPORTED_EXTENSIONS)


def resolve_url(base: str, raw: Optional[str]) -> Optional[str]:
    """Resolve ``raw`` against ``base``; blank input yields None."""
    if not raw or not raw.strip():
        return None
    try:
        return urljoin(base, raw.strip())
    except ValueError:
        return None


def host_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def normalize_source_url(text: str) -> Optional[str]:
    """Turn user input into an absolute http(s) URL, or None for free text."""
    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None
    if _SCHEME_PATTERN.match(candidate):
        return candidate if is_http_url(candidate) else None
    host = candidate.split("/", 1)[0].split("?", 1)[0]
    if not _HOST_PATTERN.match(host):
        return None
    return f"https://{candidate}"


def stable_id(value: str) -> str:
    """Deterministic short identifier for a resolved image URL."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:16]


def parse_offset(cursor: Optional[str]) -> int:
    """Decode an offset cursor; anything non-numeric or negative is 0."""
    if cursor is None:
        return 0
    try:
        offset = int(cursor.strip())
    except ValueError:
        return 0
    return offset if offset >= 0 else 0


def paginate(
    candidates: Sequence[WallpaperCandidate],
    offset: int,
    limit: int,
) -> Page:
    """Slice ``[offset, offset + limit)`` and emit the next offset if more remain."""
    start = min(offset, len(candidates))
    end = min(start + limit, len(candidates))
    next_cursor = str(end) if len(candidates) > end else None
    return Page(items=list(candidates[start:end]), next_cursor=next_cursor)
