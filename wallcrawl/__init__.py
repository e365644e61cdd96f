"""Multi-source wallpaper discovery with resumable, opaque pagination cursors."""

from .config import CrawlConfig
from .crawler import WallpaperCrawler, discover
from .fetcher import FetchError, Fetcher
from .models import Page, WallpaperCandidate

__all__ = [
    "CrawlConfig",
    "FetchError",
    "Fetcher",
    "Page",
    "WallpaperCandidate",
    "WallpaperCrawler",
    "discover",
]
