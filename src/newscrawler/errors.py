"""
Exception types raised by the crawler.
"""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class TransportError(CrawlerError):
    """Network, timeout or HTTP failure while fetching a URL."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class ParseError(CrawlerError):
    """A fetched document could not be turned into an article."""


class MalformedUrl(CrawlerError):
    """A discovered href could not be resolved to a usable URL."""


class StorageError(CrawlerError):
    """An article could not be persisted."""


class CrawlInterrupted(CrawlerError):
    """The worker was asked to stop while waiting."""


class InvalidTransition(CrawlerError):
    """A link record was moved out of a terminal state."""


class ConfigError(CrawlerError):
    """Invalid crawler configuration."""
