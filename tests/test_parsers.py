"""Default article parser and link extraction."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from newscrawler.errors import ParseError
from newscrawler.models import article_id
from newscrawler.parsers import MetaArticleParser, extract_links

LONG = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 5

ARTICLE_HTML = f"""
<html>
<head>
  <title>Site | Big news</title>
  <meta property="og:type" content="article">
  <meta property="og:title" content="Big news">
  <meta property="article:published_time" content="2024-05-01T10:00:00Z">
  <meta name="author" content="Jane Roe">
  <meta name="author" content="John Doe">
</head>
<body>
  <nav><a href="/home">Home</a></nav>
  <article><h1>Big news headline</h1><p>{LONG}</p><p>Second paragraph.</p></article>
</body>
</html>
"""


def test_extract_links_returns_hrefs():
    html = '<p><a href="/a">A</a><a name="anchor">x</a><a href="">empty</a><a href="http://x.com/b">B</a></p>'
    assert extract_links(html) == ["/a", "http://x.com/b"]


def test_parses_opengraph_article():
    article = MetaArticleParser().parse("http://news.example/big", ARTICLE_HTML)

    assert article is not None
    assert article.id == article_id("http://news.example/big")
    assert article.title == "Big news"
    assert article.published == "2024-05-01T10:00:00Z"
    assert article.authors == ["Jane Roe", "John Doe"]
    assert article.text.startswith("Lorem ipsum")
    assert article.text.endswith("Second paragraph.")
    assert "Home" not in article.text


def test_article_element_without_metadata():
    html = f"<html><body><article><h1>Heading</h1><time datetime='2024-01-02'>Jan 2</time><p>{LONG}</p></article></body></html>"
    article = MetaArticleParser().parse("http://x.com/a", html)

    assert article.title == "Heading"
    assert article.published == "2024-01-02"


def test_index_page_is_not_an_article():
    html = f"<html><head><title>Front page</title></head><body><p>{LONG}</p></body></html>"
    assert MetaArticleParser().parse("http://x.com/", html) is None


def test_short_article_is_ignored():
    html = "<html><body><article><p>Too short.</p></article></body></html>"
    assert MetaArticleParser(min_text_length=50).parse("http://x.com/a", html) is None


def test_internal_failure_becomes_parse_error():
    parser = MetaArticleParser()
    with patch.object(parser, "_parse_soup", side_effect=AttributeError("boom")):
        with pytest.raises(ParseError):
            parser.parse("http://x.com/a", ARTICLE_HTML)
