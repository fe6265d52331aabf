"""
Data structures shared by the queue, the workers and the storage sinks.
"""
from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse


class LinkStatus(str, Enum):
    PENDING = "pending"
    VISITED = "visited"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self is not LinkStatus.PENDING


@dataclass(slots=True)
class LinkRecord:
    """A discovered URL plus its crawl metadata."""
    url: str
    depth: int = 0
    status: LinkStatus = LinkStatus.PENDING
    content_hash: Optional[str] = None
    produced_article: bool = False
    # Status the link finished the previous crawl run with (restored history only)
    previous_status: Optional[LinkStatus] = None

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"Negative depth for {self.url}: {self.depth}")

    @property
    def host(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "depth": self.depth,
            "status": self.status.value,
            "content_hash": self.content_hash,
            "produced_article": self.produced_article,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkRecord":
        return cls(
            url=data["url"],
            depth=int(data.get("depth", 0)),
            status=LinkStatus(data.get("status", LinkStatus.PENDING.value)),
            content_hash=data.get("content_hash"),
            produced_article=bool(data.get("produced_article", False)),
        )


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def article_id(url: str) -> str:
    """Stable article identifier derived from its canonical URL."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class Article:
    """Content record extracted from a page."""
    url: str
    title: Optional[str] = None
    text: str = ""
    published: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    fetched_at: str = field(default_factory=utc_now_iso)
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = article_id(self.url)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class FetchResponse:
    """Raw result of fetching a URL."""
    url: str
    status_code: int
    content_type: str
    body: str
