"""Configuration objects and constants for the crawler."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

logger = logging.getLogger("wallcrawl")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Mobile Safari/537.36"
)
DEFAULT_REFERRER = "https://www.google.com"
DEFAULT_LIMIT = 30


@dataclass
class CrawlConfig:
    """Settings that control how upstream pages are fetched and paged."""

    timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    referrer: str = DEFAULT_REFERRER
    default_limit: int = DEFAULT_LIMIT
    pinterest_default_page_size: int = DEFAULT_LIMIT
    photos_size_directive: str = "=w4096-h4096"

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """Build a config, applying ``WALLCRAWL_*`` environment overrides."""
        config = cls()
        timeout = os.getenv("WALLCRAWL_TIMEOUT")
        if timeout:
            try:
                config = replace(config, timeout=float(timeout))
            except ValueError:
                logger.warning("Ignoring invalid WALLCRAWL_TIMEOUT=%r", timeout)
        user_agent = os.getenv("WALLCRAWL_USER_AGENT")
        if user_agent:
            config = replace(config, user_agent=user_agent)
        referrer = os.getenv("WALLCRAWL_REFERRER")
        if referrer:
            config = replace(config, referrer=referrer)
        return config
