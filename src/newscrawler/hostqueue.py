"""
Per-host work queue shared by the workers crawling that host.

All state changes happen under one condition variable. A record handed out by
``poll`` stays "in flight" until it is reported with ``set_visited`` or
``set_error``; a blocking ``poll`` only reports exhaustion once nothing is
pending and nothing is in flight, so a worker cannot shut down while a sibling
is still about to enqueue children.
"""
from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, List, Optional, Set

from newscrawler.errors import InvalidTransition
from newscrawler.models import LinkRecord, LinkStatus


@dataclass(slots=True, frozen=True)
class QueueCounts:
    """Point-in-time view of a queue's bookkeeping."""
    pending: int
    in_flight: int
    visited: int
    error: int
    articles: int

    @property
    def known(self) -> int:
        return self.pending + self.in_flight + self.visited + self.error


class HostQueue:
    """FIFO of pending links for one host plus the index of every known URL."""

    def __init__(self, host: str) -> None:
        self._host = host
        self._cond = threading.Condition()
        self._pending: Deque[LinkRecord] = deque()
        self._index: Dict[str, LinkRecord] = {}
        self._in_flight: Set[str] = set()
        self._visited = 0
        self._error = 0
        self._closed = False

    @classmethod
    def restore(cls, host: str, records: Iterable[LinkRecord]) -> "HostQueue":
        """
        Build a queue for a new crawl run from a previous run's records.

        Every record is pending again; its earlier status is kept in
        ``previous_status`` and its content hash is kept for change detection.
        """
        queue = cls(host)
        with queue._cond:
            for old in records:
                if old.url in queue._index:
                    continue
                record = LinkRecord(
                    url=old.url,
                    depth=old.depth,
                    content_hash=old.content_hash,
                    produced_article=old.produced_article,
                    previous_status=old.status,
                )
                queue._index[record.url] = record
                queue._pending.append(record)
        return queue

    @property
    def host(self) -> str:
        return self._host

    @property
    def exhausted(self) -> bool:
        """True once nothing is pending and nothing is in flight, or the queue is closed."""
        with self._cond:
            return self._closed or not (self._pending or self._in_flight)

    def add(self, url: str, depth: int) -> bool:
        """Index and enqueue ``url`` unless it is already known."""
        with self._cond:
            if url in self._index:
                return False
            record = LinkRecord(url=url, depth=depth)
            self._index[url] = record
            self._pending.append(record)
            self._cond.notify()
            return True

    def poll(self, timeout: Optional[float] = None) -> Optional[LinkRecord]:
        """
        Remove and return the oldest pending record.

        Blocks while the queue is empty but other records are in flight.
        Returns None once the queue is exhausted, closed, or ``timeout``
        seconds have passed without work.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._closed and not self._pending:
                if not self._in_flight:
                    return None
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return None
                self._cond.wait(remaining)
            if self._closed:
                return None
            return self._take()

    def _take(self) -> LinkRecord:
        record = self._pending.popleft()
        self._in_flight.add(record.url)
        return record

    def set_visited(self, record: LinkRecord) -> None:
        self._finish(record, LinkStatus.VISITED)

    def set_error(self, record: LinkRecord) -> None:
        self._finish(record, LinkStatus.ERROR)

    def _finish(self, record: LinkRecord, status: LinkStatus) -> None:
        with self._cond:
            if record.status.terminal:
                raise InvalidTransition(
                    f"{record.url} is already {record.status.value}, cannot mark {status.value}"
                )
            record.status = status
            if status is LinkStatus.VISITED:
                self._visited += 1
            else:
                self._error += 1
            self._in_flight.discard(record.url)
            self._cond.notify_all()

    def close(self) -> None:
        """Stop handing out work and wake every blocked poller."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def size(self) -> int:
        """Number of pending records."""
        with self._cond:
            return len(self._pending)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, url: object) -> bool:
        with self._cond:
            return url in self._index

    def get(self, url: str) -> Optional[LinkRecord]:
        with self._cond:
            return self._index.get(url)

    def counts(self) -> QueueCounts:
        with self._cond:
            return QueueCounts(
                pending=len(self._pending),
                in_flight=len(self._in_flight),
                visited=self._visited,
                error=self._error,
                articles=sum(1 for r in self._index.values() if r.produced_article),
            )

    def records(self) -> List[LinkRecord]:
        """All known records in discovery order."""
        with self._cond:
            return list(self._index.values())

    def __repr__(self) -> str:
        c = self.counts()
        return (
            f"HostQueue({self._host!r}, pending={c.pending}, in_flight={c.in_flight}, "
            f"visited={c.visited}, error={c.error})"
        )
