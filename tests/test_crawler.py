import pytest
from conftest import gallery_html, pin, pws_page

from wallcrawl.crawler import WallpaperCrawler
from wallcrawl.models import Page
from wallcrawl.pinterest import PinterestCursor

SITE = "https://walls.test/gallery"
BOARD = "https://www.pinterest.com/wallpapercollec/wallpapers/"


def crawler_for(fetcher):
    return WallpaperCrawler(fetcher=fetcher)


def test_generic_end_to_end_paging(make_fetcher):
    crawler = crawler_for(make_fetcher({SITE: gallery_html(45)}))

    first = crawler.discover(SITE, limit=20)
    second = crawler.discover(SITE, limit=20, cursor=first.next_cursor)
    third = crawler.discover(SITE, limit=20, cursor=second.next_cursor)

    assert (len(first.items), first.next_cursor) == (20, "20")
    assert (len(second.items), second.next_cursor) == (20, "40")
    assert (len(third.items), third.next_cursor) == (5, None)


def test_scheme_less_url_is_normalised(make_fetcher):
    fetcher = make_fetcher({"https://walls.test/gallery": gallery_html(2)})
    page = crawler_for(fetcher).discover("walls.test/gallery", limit=5)
    assert len(page.items) == 2


def test_free_text_searches_pinterest(make_fetcher):
    url = "https://www.pinterest.com/search/pins/?q=dark+mountains"
    html = (
        '<img src="https://i.pinimg.com/236x/a.jpg" alt="Peak">'
        '<img src="https://i.pinimg.com/236x/b.jpg">'
    )
    page = crawler_for(make_fetcher({url: html})).discover("dark mountains", limit=10)
    assert [c.title for c in page.items] == ["Peak", "Pinterest Pin"]
    assert page.next_cursor is None


def test_pinterest_board_then_continuation(make_fetcher):
    state = {
        "resourceResponses": [
            {
                "name": "BoardFeedResource",
                "resource": {"options": {"board_id": "42"}},
                "resource_response": {"data": [pin("1")], "bookmark": "bm-1"},
            }
        ]
    }
    continuation = {"resource_response": {"data": [pin("2")], "bookmark": "-end-"}}
    fetcher = make_fetcher({BOARD: pws_page(state)}, json_bodies=[continuation])
    crawler = crawler_for(fetcher)

    first = crawler.discover(BOARD, limit=15)
    assert [c.id for c in first.items] == ["1"]
    assert PinterestCursor.decode(first.next_cursor).page_size == 15

    second = crawler.discover(BOARD, limit=15, cursor=first.next_cursor)
    assert [c.id for c in second.items] == ["2"]
    assert second.next_cursor is None


def test_pinterest_falls_back_to_generic_when_state_missing(make_fetcher):
    html = '<img src="https://i.pinimg.com/564x/z.jpg" alt="Fallback">'
    page = crawler_for(make_fetcher({BOARD: html})).discover(BOARD, limit=5)
    assert [c.title for c in page.items] == ["Fallback"]


def test_offset_cursor_on_pinterest_host_uses_generic(make_fetcher):
    html = "".join(f'<img src="https://i.pinimg.com/564x/{i}.jpg">' for i in range(4))
    fetcher = make_fetcher({BOARD: html})
    page = crawler_for(fetcher).discover(BOARD, limit=2, cursor="2")
    assert [c.image_url.rsplit("/", 1)[1] for c in page.items] == ["2.jpg", "3.jpg"]
    assert page.next_cursor is None


def test_garbled_pinterest_cursor_ends_paging(make_fetcher):
    fetcher = make_fetcher({BOARD: gallery_html(3)})
    page = crawler_for(fetcher).discover(BOARD, limit=5, cursor="pinterest:garbage")
    assert page == Page()
    assert fetcher.requests == []


def test_drive_without_folder_id_falls_back_to_generic(make_fetcher):
    url = "https://drive.google.com/drive/my-drive"
    fetcher = make_fetcher({url: '<img src="https://drive.test/a.png">'})
    page = crawler_for(fetcher).discover(url, limit=5)
    assert [c.image_url for c in page.items] == ["https://drive.test/a.png"]
    assert [r[1] for r in fetcher.requests] == [url]


def test_drive_folder_uses_offset_cursor_and_token(make_fetcher):
    embed = "https://drive.google.com/embeddedfolderview?id=F1"
    listing = "".join(
        f'<a href="https://drive.google.com/file/d/id{i}/view"><img src="t"></a>' for i in range(3)
    )
    fetcher = make_fetcher({embed: listing})
    page = crawler_for(fetcher).discover(
        "https://drive.google.com/drive/folders/F1", limit=2, cursor="1", token="t0k"
    )
    assert [c.id for c in page.items] == ["id1", "id2"]
    assert page.next_cursor is None
    assert fetcher.requests[0][3] == {"Authorization": "Bearer t0k"}


def test_google_photos_album(make_fetcher):
    album = "https://photos.app.goo.gl/abc123"
    html = '"https://lh3.googleusercontent.com/pw/one=w10" "https://lh3.googleusercontent.com/pw/two"'
    page = crawler_for(make_fetcher({album: html})).discover(album, limit=1)
    assert page.items[0].image_url == "https://lh3.googleusercontent.com/pw/one=w4096-h4096"
    assert page.next_cursor == "1"


def test_fetch_failure_everywhere_yields_empty_page(make_fetcher):
    page = crawler_for(make_fetcher()).discover("https://down.test/", limit=5)
    assert page.items == [] and page.next_cursor is None


def test_unexpected_extractor_error_is_contained(make_fetcher, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("markup changed")

    monkeypatch.setattr("wallcrawl.crawler.scrape_images", explode)
    page = crawler_for(make_fetcher()).discover(SITE, limit=5)
    assert page == Page()


def test_blank_source_and_cursor(make_fetcher):
    fetcher = make_fetcher({SITE: gallery_html(1)})
    crawler = crawler_for(fetcher)
    assert crawler.discover("   ", limit=5) == Page()
    assert len(crawler.discover(SITE, limit=5, cursor="  ").items) == 1


def test_default_limit_from_config(make_fetcher):
    page = crawler_for(make_fetcher({SITE: gallery_html(40)})).discover(SITE)
    assert len(page.items) == 30 and page.next_cursor == "30"


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limit_is_a_programming_error(make_fetcher, limit):
    with pytest.raises(ValueError):
        crawler_for(make_fetcher()).discover(SITE, limit=limit)
