"""Data models returned by the discovery crawler."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class WallpaperCandidate:
    """Image discovered on an upstream source, before any caller-side dedupe."""

    id: str
    title: str
    image_url: str
    source_url: str
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Page:
    """One page of candidates plus the opaque cursor for the next one."""

    items: List[WallpaperCandidate] = field(default_factory=list)
    next_cursor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "next_cursor": self.next_cursor,
        }


@dataclass
class FetchedPage:
    """Response body together with the final URL after redirects."""

    url: str
    text: str
