"""
HTTP transport plus the fetch-and-parse capability consumed by workers.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import requests

from newscrawler.errors import TransportError
from newscrawler.models import Article, FetchResponse
from newscrawler.parsers import ArticleParser, MetaArticleParser, extract_links

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:25.0) Gecko/20100101 Firefox/25.0"
DEFAULT_REFERRER = "http://www.google.com"


class Fetcher(Protocol):
    """What a worker needs from the outside world to process one link."""

    def fetch(self, url: str, timeout: float) -> FetchResponse:
        ...

    def parse(self, response: FetchResponse) -> Optional[Article]:
        ...

    def extract_links(self, response: FetchResponse) -> List[str]:
        ...


class HttpFetcher:
    """Fetcher backed by a requests session and an ArticleParser."""

    def __init__(
        self,
        parser: Optional[ArticleParser] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        referrer: Optional[str] = DEFAULT_REFERRER,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.parser = parser or MetaArticleParser()
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent
        if referrer:
            self.session.headers["Referer"] = referrer

    def fetch(self, url: str, timeout: float) -> FetchResponse:
        try:
            resp = self.session.get(url, timeout=timeout, allow_redirects=True)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(url, str(e)) from e

        return FetchResponse(
            url=resp.url or url,
            status_code=resp.status_code,
            content_type=resp.headers.get("content-type") or "",
            body=resp.text,
        )

    def parse(self, response: FetchResponse) -> Optional[Article]:
        return self.parser.parse(response.url, response.body)

    def extract_links(self, response: FetchResponse) -> List[str]:
        return extract_links(response.body)

    def close(self) -> None:
        self.session.close()
