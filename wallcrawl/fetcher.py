"""HTTP access shared by every extractor."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .config import CrawlConfig
from .models import FetchedPage

logger = logging.getLogger("wallcrawl")

JSON_ACCEPT = "application/json, text/javascript, */*; q=0.01"


class FetchError(Exception):
    """Raised when an upstream request fails or returns a non-2xx status."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


def bearer_headers(token: Optional[str]) -> Dict[str, str]:
    """Authorization header for an opaque bearer token supplied by the caller."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


class Fetcher:
    """Blocking GET client with a fixed user-agent, referrer and timeout."""

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or CrawlConfig()
        self._session = session

    def _headers(self, extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
        headers = {
            "User-Agent": self.config.user_agent,
            "Referer": self.config.referrer,
        }
        if extra:
            headers.update(extra)
        return headers

    def _get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        send = self._session.get if self._session is not None else requests.get
        logger.debug("GET %s", url)
        try:
            resp = send(
                url,
                params=params,
                headers=self._headers(headers),
                timeout=self.config.timeout,
                allow_redirects=True,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise FetchError(url, f"HTTP {status}", status=status) from exc
        except requests.RequestException as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return resp

    def fetch_page(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> FetchedPage:
        """Fetch a document and return its text along with the final URL."""
        resp = self._get(url, headers=headers)
        return FetchedPage(url=resp.url or url, text=resp.text)

    def fetch_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Issue an AJAX-style GET and decode the JSON body."""
        merged = {"Accept": JSON_ACCEPT, "X-Requested-With": "XMLHttpRequest"}
        if headers:
            merged.update(headers)
        resp = self._get(url, params=params, headers=merged)
        try:
            return resp.json()
        except ValueError as exc:
            raise FetchError(url, "Response was not valid JSON") from exc
