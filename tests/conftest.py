"""Shared fakes for the crawler tests."""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Union

import pytest

from newscrawler.config import CrawlConfig
from newscrawler.errors import TransportError
from newscrawler.models import Article, FetchResponse
from newscrawler.parsers import extract_links


def html_page(*hrefs: str, body: str = "") -> str:
    links = "".join(f'<a href="{h}">link</a>' for h in hrefs)
    return f"<html><head><title>t</title></head><body>{body}{links}</body></html>"


class FakeFetcher:
    """
    Serves canned pages. A page value may be a string (HTML), a FetchResponse,
    or an exception instance to raise.
    """

    def __init__(
        self,
        pages: Dict[str, Union[str, FetchResponse, Exception]],
        articles: Optional[Dict[str, Article]] = None,
        parse_error: Optional[Exception] = None,
        on_fetch: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.pages = pages
        self.articles = articles or {}
        self.parse_error = parse_error
        self.on_fetch = on_fetch
        self.fetched: List[str] = []
        self.parsed: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str, timeout: float) -> FetchResponse:
        with self._lock:
            self.fetched.append(url)
        if self.on_fetch:
            self.on_fetch(url)
        page = self.pages.get(url)
        if page is None:
            raise TransportError(url, "404 Not Found")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, FetchResponse):
            return page
        return FetchResponse(url=url, status_code=200, content_type="text/html; charset=utf-8", body=page)

    def parse(self, response: FetchResponse) -> Optional[Article]:
        with self._lock:
            self.parsed.append(response.url)
        if self.parse_error:
            raise self.parse_error
        return self.articles.get(response.url)

    def extract_links(self, response: FetchResponse) -> List[str]:
        return extract_links(response.body)


class RecordingSink:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.saved: List[Article] = []
        self._lock = threading.Lock()

    def save(self, article: Article) -> None:
        if self.fail:
            raise OSError("disk full")
        with self._lock:
            self.saved.append(article)


@pytest.fixture
def config() -> CrawlConfig:
    return CrawlConfig(timeout=1.0, delay=0.0, max_depth=1)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
