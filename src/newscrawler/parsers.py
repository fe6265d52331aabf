"""
Turning fetched HTML into articles and outbound links.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from bs4 import BeautifulSoup, SoupStrainer

from newscrawler.errors import ParseError
from newscrawler.models import Article

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


def extract_links(html: str) -> List[str]:
    """Extract all href values from <a> tags using optimized parsing."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return [a["href"] for a in soup.find_all("a") if a.get("href")]


class ArticleParser(ABC):
    """Decides whether a page is an article and extracts it."""

    @abstractmethod
    def parse(self, url: str, html: str) -> Optional[Article]:
        """Return the article found on the page, or None. Raises ParseError."""


class MetaArticleParser(ArticleParser):
    """
    Generic news-page parser based on OpenGraph/article metadata.

    A page counts as an article when it declares ``og:type=article``, carries
    ``article:published_time`` or contains an ``<article>`` element, and its
    extracted text is at least ``min_text_length`` characters long.
    """

    def __init__(self, min_text_length: int = 200) -> None:
        self.min_text_length = min_text_length

    def parse(self, url: str, html: str) -> Optional[Article]:
        try:
            soup = BeautifulSoup(html, "lxml")
            return self._parse_soup(url, soup)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Failed to parse {url}: {e}") from e

    def _parse_soup(self, url: str, soup: BeautifulSoup) -> Optional[Article]:
        og_type = _meta(soup, prop="og:type")
        published = _meta(soup, prop="article:published_time")
        article_el = soup.find("article")

        if (og_type or "").lower() != "article" and not published and article_el is None:
            return None

        container = article_el or soup.body or soup
        paragraphs = [
            text for p in container.find_all("p")
            if (text := p.get_text(separator=" ", strip=True))
        ]
        text = "\n\n".join(paragraphs) or container.get_text(separator=" ", strip=True)
        if len(text) < self.min_text_length:
            return None

        return Article(
            url=url,
            title=self._title(soup),
            text=text,
            published=published or _time_datetime(article_el),
            authors=_authors(soup),
        )

    @staticmethod
    def _title(soup: BeautifulSoup) -> Optional[str]:
        title = _meta(soup, prop="og:title")
        if title:
            return title
        h1 = soup.find("h1")
        if h1 and (text := h1.get_text(separator=" ", strip=True)):
            return text
        if soup.title and soup.title.string:
            return soup.title.string.strip() or None
        return None


def _meta(soup: BeautifulSoup, prop: str) -> Optional[str]:
    tag = soup.find("meta", attrs={"property": prop})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _authors(soup: BeautifulSoup) -> List[str]:
    authors = []
    for tag in soup.find_all("meta", attrs={"name": "author"}):
        content = (tag.get("content") or "").strip()
        if content and content not in authors:
            authors.append(content)
    return authors


def _time_datetime(article_el) -> Optional[str]:
    if article_el is None:
        return None
    time_el = article_el.find("time", attrs={"datetime": True})
    return time_el["datetime"] if time_el else None
