"""MCP server exposing wallpaper discovery as a tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .config import CrawlConfig
from .crawler import WallpaperCrawler

logger = logging.getLogger("wallcrawl.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="wallcrawl")


@mcp.tool()
def discover(
    source: str,
    limit: int = 30,
    cursor: Optional[str] = None,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    """Find wallpaper images for a URL or Pinterest search query, one page at a time."""
    crawler = WallpaperCrawler(CrawlConfig.from_env())
    return crawler.discover(source, limit=limit, cursor=cursor, token=token).to_dict()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
