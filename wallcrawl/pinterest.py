"""Pinterest board and profile feeds via the site's internal resource protocol.

The first page is read from the JSON state embedded in the profile or board
HTML. Later pages replay the matching ``/resource/<Name>/get/`` call with the
bookmark Pinterest handed out last time. Everything needed to make that call
travels inside an opaque :class:`PinterestCursor`, so callers never see the
protocol. Any shape mismatch degrades to "no result" rather than raising.
"""

from __future__ import annotations

import base64
import binascii
import html
import json
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote_plus, urljoin, urlparse

from bs4 import BeautifulSoup

from .fetcher import FetchError, Fetcher
from .models import Page, WallpaperCandidate
from .utils import is_http_url, resolve_url

logger = logging.getLogger("wallcrawl.pinterest")

PINTEREST_ORIGIN = "https://www.pinterest.com"
SEARCH_URL = PINTEREST_ORIGIN + "/search/pins/?q={query}"
CURSOR_PREFIX = "pinterest:"
END_BOOKMARK = "-end-"
IMAGE_SIZE_ORDER = ("orig", "736x", "600x", "564x", "474x", "236x")
DEFAULT_PIN_TITLE = "Pinterest Pin"
STATE_SCRIPT_IDS = ("__PWS_DATA__", "__PWS_INITIAL_PROPS__")
# First path segments that are site sections rather than usernames.
RESERVED_SEGMENTS = {"pin", "search", "ideas", "today", "explore", "resource", "_"}


class ResourceType(Enum):
    BOARD = "BoardFeedResource"
    USER_PINS = "UserPinsResource"

    @property
    def endpoint(self) -> str:
        return f"{PINTEREST_ORIGIN}/resource/{self.value}/get/"


@dataclass
class PinterestTarget:
    """A Pinterest URL classified as a board feed or a user's pin feed."""

    resource_type: ResourceType
    username: str
    board_slug: Optional[str]
    page_path: str


@dataclass
class PinterestCursor:
    """Everything needed to replay one resource call for the next page."""

    resource_type: str
    username: Optional[str]
    board_slug: Optional[str]
    board_id: Optional[str]
    page_path: str
    bookmark: str
    page_size: int

    def encode(self) -> str:
        payload = {
            "type": self.resource_type,
            "username": self.username,
            "slug": self.board_slug,
            "boardId": self.board_id,
            "pagePath": self.page_path,
            "bookmark": self.bookmark,
            "pageSize": self.page_size,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return CURSOR_PREFIX + base64.urlsafe_b64encode(raw).decode("ascii")

    @classmethod
    def decode(
        cls, value: Optional[str], default_page_size: int = 30
    ) -> Optional["PinterestCursor"]:
        """Parse an encoded cursor; anything malformed yields None."""
        if not is_pinterest_cursor(value):
            return None
        try:
            raw = base64.urlsafe_b64decode(value[len(CURSOR_PREFIX):].encode("ascii"))
            data = json.loads(raw.decode("utf-8"))
        except (ValueError, binascii.Error, UnicodeError):
            return None
        if not isinstance(data, dict):
            return None

        resource_type = _text(data.get("type"))
        page_path = _text(data.get("pagePath"))
        bookmark = _text(data.get("bookmark"))
        if not resource_type or not page_path or not bookmark:
            return None
        page_size = data.get("pageSize")
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            page_size = default_page_size
        return cls(
            resource_type=resource_type,
            username=_text(data.get("username")),
            board_slug=_text(data.get("slug")),
            board_id=_text(data.get("boardId")),
            page_path=ensure_path(page_path),
            bookmark=bookmark,
            page_size=page_size,
        )


def is_pinterest_cursor(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(CURSOR_PREFIX)


def is_pinterest_host(host: str) -> bool:
    return "pinterest." in host


def search_url(query: str) -> str:
    return SEARCH_URL.format(query=quote_plus(query.strip()))


def ensure_path(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return path if path.endswith("/") else path + "/"


def _text(value: Any) -> Optional[str]:
    """Non-blank string form of a JSON scalar, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def classify_url(url: str) -> Optional[PinterestTarget]:
    """Classify a Pinterest URL as a board or a user pin feed."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not is_pinterest_host((parsed.hostname or "").lower()):
        return None
    segments = [segment for segment in parsed.path.split("/") if segment.strip()]
    if not segments or segments[0].lower() in RESERVED_SEGMENTS:
        return None

    username = segments[0]
    if len(segments) == 1:
        return PinterestTarget(
            ResourceType.USER_PINS, username, None, ensure_path(f"/{username}/_pins/")
        )
    page_path = ensure_path(parsed.path)
    if segments[1].lower() in ("_pins", "_created"):
        return PinterestTarget(ResourceType.USER_PINS, username, None, page_path)
    return PinterestTarget(ResourceType.BOARD, username, segments[1], page_path)


def find_node(value: Any, predicate: Callable[[Dict[str, Any]], bool]) -> Optional[Dict[str, Any]]:
    """Depth-first search for the first JSON object satisfying ``predicate``."""
    stack = [value]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            if predicate(node):
                return node
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))
    return None


def _is_resource(name: str) -> Callable[[Dict[str, Any]], bool]:
    def predicate(node: Dict[str, Any]) -> bool:
        return node.get("name") == name and isinstance(node.get("resource_response"), dict)

    return predicate


def _unescape(url: str) -> str:
    url = url.replace("\\u0026", "&").replace("\\u003d", "=").replace("\\/", "/")
    return html.unescape(url)


def parse_pins(data: Any) -> List[WallpaperCandidate]:
    """Turn a resource ``data`` array into candidates, skipping bad records."""
    if not isinstance(data, list):
        return []
    items: List[WallpaperCandidate] = []
    seen = set()
    for pin in data:
        if not isinstance(pin, dict):
            continue
        pin_id = _text(pin.get("id"))
        images = pin.get("images")
        if not pin_id or not isinstance(images, dict):
            continue

        image_url = None
        for size in IMAGE_SIZE_ORDER:
            variant = images.get(size)
            raw = _text(variant.get("url")) if isinstance(variant, dict) else None
            resolved = resolve_url("https:", _unescape(raw)) if raw else None
            if resolved and is_http_url(resolved):
                image_url = resolved
                break
        if not image_url or image_url in seen:
            continue
        seen.add(image_url)

        description = pin.get("grid_description")
        title = (
            _text(pin.get("title"))
            or _text(pin.get("grid_title"))
            or (_text(description.get("text")) if isinstance(description, dict) else None)
            or DEFAULT_PIN_TITLE
        )
        source_url = _text(pin.get("link")) or _text(pin.get("seo_link"))
        source_url = (
            urljoin(PINTEREST_ORIGIN, source_url)
            if source_url
            else f"{PINTEREST_ORIGIN}/pin/{pin_id}/"
        )
        orig = images.get("orig") if isinstance(images.get("orig"), dict) else {}
        items.append(
            WallpaperCandidate(
                id=pin_id,
                title=title,
                image_url=image_url,
                source_url=source_url,
                width=_positive_int(orig.get("width")),
                height=_positive_int(orig.get("height")),
            )
        )
    return items


def _bookmark(value: Any) -> Optional[str]:
    bookmark = _text(value)
    if bookmark is None or bookmark == END_BOOKMARK:
        return None
    return bookmark


def _state_payloads(html_text: str) -> List[Any]:
    """Decoded JSON from embedded state scripts, well-known ids first."""
    soup = BeautifulSoup(html_text, "html.parser")
    scripts = [soup.find("script", id=script_id) for script_id in STATE_SCRIPT_IDS]
    scripts += soup.find_all("script", attrs={"type": "application/json"})
    payloads = []
    visited = set()
    for script in scripts:
        if script is None or id(script) in visited:
            continue
        visited.add(id(script))
        body = script.string or script.get_text()
        if not body or not body.strip():
            continue
        try:
            payloads.append(json.loads(body))
        except ValueError:
            logger.debug("Skipping non-JSON script block %s", script.get("id"))
    return payloads


def parse_initial_page(
    html_text: str, target: PinterestTarget, limit: int
) -> Optional[Page]:
    """Extract the first page of pins from a board or profile HTML page."""
    resource_name = target.resource_type.value
    for payload in _state_payloads(html_text):
        resource = find_node(payload, _is_resource(resource_name))
        if resource is None:
            continue
        response = resource["resource_response"]
        pins = parse_pins(response.get("data"))
        if not pins:
            continue

        options = resource.get("resource", {})
        options = options.get("options", {}) if isinstance(options, dict) else {}
        if not isinstance(options, dict):
            options = {}
        bookmark = _bookmark(response.get("bookmark"))
        next_cursor = None
        if bookmark:
            next_cursor = PinterestCursor(
                resource_type=resource_name,
                username=target.username,
                board_slug=_text(options.get("slug")) or target.board_slug,
                board_id=_text(options.get("board_id")),
                page_path=ensure_path(target.page_path),
                bookmark=bookmark,
                page_size=_positive_int(options.get("page_size")) or limit,
            ).encode()
        return Page(items=pins, next_cursor=next_cursor)
    logger.debug("No %s block found in embedded state", resource_name)
    return None


def fetch_initial_page(fetcher: Fetcher, url: str, limit: int) -> Optional[Page]:
    """First page of a board or profile, or None when the URL is not a feed."""
    target = classify_url(url)
    if target is None:
        return None
    try:
        fetched = fetcher.fetch_page(url)
    except FetchError as exc:
        logger.warning("Failed to fetch Pinterest page %s: %s", url, exc)
        return None
    return parse_initial_page(fetched.text, target, limit)


def build_request_params(cursor: PinterestCursor) -> Dict[str, str]:
    options: Dict[str, Any] = {
        "isPrefetch": False,
        "page_size": cursor.page_size,
        "bookmarks": [cursor.bookmark],
    }
    if cursor.board_id:
        options["board_id"] = cursor.board_id
    if cursor.board_slug:
        options["slug"] = cursor.board_slug
    if cursor.username:
        options["username"] = cursor.username
    payload = {"options": options, "context": {}}
    return {
        "source_url": cursor.page_path,
        "data": json.dumps(payload, separators=(",", ":")),
        "_": str(int(time.time() * 1000)),
    }


def fetch_continuation(fetcher: Fetcher, cursor: PinterestCursor) -> Page:
    """Replay the resource call stored in ``cursor`` to get the next page."""
    try:
        resource_type = ResourceType(cursor.resource_type)
    except ValueError:
        logger.debug("Unknown Pinterest resource %s", cursor.resource_type)
        return Page()

    try:
        body = fetcher.fetch_json(
            resource_type.endpoint,
            params=build_request_params(cursor),
        )
    except FetchError as exc:
        logger.warning("Pinterest continuation failed: %s", exc)
        return Page()

    response = body.get("resource_response") if isinstance(body, dict) else None
    if not isinstance(response, dict):
        logger.debug("Pinterest continuation returned no resource_response")
        return Page()

    bookmark = _bookmark(response.get("bookmark"))
    if bookmark is None and "bookmark" not in response:
        options = body.get("resource", {})
        options = options.get("options", {}) if isinstance(options, dict) else {}
        bookmarks = options.get("bookmarks") if isinstance(options, dict) else None
        if isinstance(bookmarks, list) and bookmarks:
            bookmark = _bookmark(bookmarks[0])
    # Pinterest may echo the bookmark it was sent; that is not a new page.
    if bookmark == cursor.bookmark:
        bookmark = None

    pins = parse_pins(response.get("data"))
    next_cursor = replace(cursor, bookmark=bookmark).encode() if bookmark else None
    return Page(items=pins, next_cursor=next_cursor)
