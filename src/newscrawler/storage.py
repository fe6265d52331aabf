"""
Sinks that persist extracted articles.
"""
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import List, Protocol, Union

from newscrawler.errors import StorageError
from newscrawler.models import Article


class StorageSink(Protocol):
    def save(self, article: Article) -> None:
        ...


class MemorySink:
    """Keeps saved articles in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.articles: List[Article] = []

    def save(self, article: Article) -> None:
        with self._lock:
            self.articles.append(article)

    def __len__(self) -> int:
        return len(self.articles)


class JsonLinesSink:
    """Appends one JSON object per article to a file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def save(self, article: Article) -> None:
        line = json.dumps(article.to_dict(), ensure_ascii=False)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")


class StreamSink:
    """Writes JSON lines to an already open text stream (e.g. stdout)."""

    def __init__(self, stream) -> None:
        self.stream = stream
        self._lock = threading.Lock()

    def save(self, article: Article) -> None:
        line = json.dumps(article.to_dict(), ensure_ascii=False)
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()


def archive_article(root: Union[str, Path], host: str, article: Article) -> Path:
    """Write ``article`` to ``<root>/<host>/<article.id>.json``."""
    if not host:
        raise StorageError(f"Cannot archive {article.url}: no host")
    path = Path(root) / host / f"{article.id}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(article.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return path
