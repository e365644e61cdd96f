import json

import pytest

from wallcrawl.fetcher import FetchError
from wallcrawl.models import FetchedPage


class FakeFetcher:
    """Serves canned responses keyed by URL and records every request."""

    def __init__(self, pages=None, json_bodies=None):
        self.pages = dict(pages or {})
        self.json_bodies = list(json_bodies or [])
        self.requests = []

    def fetch_page(self, url, headers=None):
        self.requests.append(("page", url, None, headers))
        if url not in self.pages:
            raise FetchError(url, "HTTP 404", status=404)
        body = self.pages[url]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, FetchedPage):
            return body
        return FetchedPage(url=url, text=body)

    def fetch_json(self, url, params=None, headers=None):
        self.requests.append(("json", url, params, headers))
        if not self.json_bodies:
            raise FetchError(url, "HTTP 500", status=500)
        body = self.json_bodies.pop(0)
        if isinstance(body, Exception):
            raise body
        return body


@pytest.fixture
def make_fetcher():
    return FakeFetcher


def gallery_html(count, start=0, ext="jpg"):
    tags = "\n".join(
        f'<img src="/img/{i}.{ext}" alt="image {i}">' for i in range(start, start + count)
    )
    return f"<html><body>{tags}</body></html>"


def pws_page(payload):
    return (
        "<html><head>"
        f'<script id="__PWS_DATA__" type="application/json">{json.dumps(payload)}</script>'
        "</head><body></body></html>"
    )


def pin(pin_id, url=None, **extra):
    record = {
        "id": pin_id,
        "images": {
            "orig": {"url": url or f"https://i.pinimg.com/originals/{pin_id}.jpg",
                     "width": 1080, "height": 1920},
            "236x": {"url": f"https://i.pinimg.com/236x/{pin_id}.jpg"},
        },
    }
    record.update(extra)
    return record
