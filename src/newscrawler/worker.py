"""
The crawl loop: drain one host queue, fetching, storing and expanding links.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from newscrawler.config import CrawlConfig
from newscrawler.errors import CrawlInterrupted, MalformedUrl, ParseError, StorageError, TransportError
from newscrawler.fetch import Fetcher
from newscrawler.hostqueue import HostQueue
from newscrawler.models import Article, FetchResponse, LinkRecord, LinkStatus
from newscrawler.storage import StorageSink, archive_article
from newscrawler.urls import content_digest, host_of, is_html_content_type, is_valid_url, normalize_url

logger = logging.getLogger(__name__)

# How long a blocked poll waits before re-checking for a stop request
POLL_INTERVAL = 0.5


@dataclass(slots=True)
class WorkerStats:
    """Per-worker counters collected during a crawl."""
    fetched: int = 0
    articles: int = 0
    unchanged: int = 0
    skipped: int = 0
    errors: int = 0
    discovered: int = 0


class Worker:
    """Processes links from one HostQueue until it is exhausted or stopped."""

    def __init__(
        self,
        queue: HostQueue,
        fetcher: Fetcher,
        sink: StorageSink,
        config: CrawlConfig,
        stop_event: Optional[threading.Event] = None,
        name: Optional[str] = None,
    ) -> None:
        self.queue = queue
        self.fetcher = fetcher
        self.sink = sink
        self.config = config
        self.stop_event = stop_event or threading.Event()
        self.name = name or f"worker-{queue.host}"
        self.stats = WorkerStats()

    def stop(self) -> None:
        self.stop_event.set()

    def next_link(self) -> Optional[LinkRecord]:
        """Block until a link is available; None once the queue is exhausted or a stop is requested."""
        while not self.stop_event.is_set():
            record = self.queue.poll(timeout=POLL_INTERVAL)
            if record is not None:
                return record
            if self.queue.exhausted:
                return None
        return None

    def run(self) -> WorkerStats:
        logger.info("Running %s on %s", self.name, self.queue.host)
        while True:
            record = self.next_link()
            if record is None:
                logger.info("Queue empty. %s shutting down on %s", self.name, self.queue.host)
                break
            try:
                self.explore(record)
                self._pause(record)
                self.queue.set_visited(record)
            except TransportError as e:
                self._fail(record)
                logger.error("Failed to fetch %s (depth %d): %s", record.url, record.depth, e)
            except CrawlInterrupted:
                self._fail(record)
                logger.warning("%s interrupted on %s, shutting down", self.name, record.url)
                break
            except Exception:
                self._fail(record)
                logger.exception("Unexpected error exploring %s", record.url)
        return self.stats

    def explore(self, record: LinkRecord) -> None:
        """Fetch one link, store its article and enqueue its children."""
        if self.stop_event.is_set():
            raise CrawlInterrupted(record.url)

        logger.info("Fetching: %s, Queue: %d", record.url, self.queue.size())
        response = self.fetcher.fetch(record.url, self.config.timeout)
        self.stats.fetched += 1

        if not is_html_content_type(response.content_type):
            logger.info("Skipping non-HTML response on %s (%s)", record.url, response.content_type)
            record.content_hash = None
            self.stats.skipped += 1
            return

        digest = self._digest(record, response)
        if digest is not None:
            if record.previous_status is LinkStatus.VISITED and digest == record.content_hash:
                logger.info("No change on url: %s", record.url)
                self.stats.unchanged += 1
                return
            record.content_hash = digest

        try:
            article = self.fetcher.parse(response)
        except ParseError as e:
            logger.error("Failed to parse link %s: %s", record.url, e)
        else:
            if article is not None and self._save(record, article):
                record.produced_article = True
                self.stats.articles += 1
                logger.info("Found article on: %s, Queue: %d", record.url, self.queue.size())

        if record.depth < self.config.max_depth:
            self.stats.discovered += self._discover(record, response)

    def _digest(self, record: LinkRecord, response: FetchResponse) -> Optional[str]:
        try:
            return content_digest(response.body)
        except (UnicodeError, ValueError) as e:
            logger.error("Failed to calculate hash for link %s: %s", record.url, e)
            return None

    def _save(self, record: LinkRecord, article: Article) -> bool:
        logger.debug(" - Saving: %s", record.url)
        if self.config.archive_path:
            try:
                archive_article(self.config.archive_path, record.host, article)
            except (OSError, StorageError) as e:
                logger.error("Failed to save article to file. %s", e)
        try:
            self.sink.save(article)
        except Exception:
            logger.exception("Failed to store article from %s", record.url)
            return False
        return True

    def _discover(self, record: LinkRecord, response: FetchResponse) -> int:
        try:
            hrefs = self.fetcher.extract_links(response)
        except Exception:
            logger.exception("Failed to extract links from %s", record.url)
            return 0
        added = 0
        for href in hrefs:
            try:
                url = normalize_url(href, base=response.url)
            except MalformedUrl as e:
                logger.warning("Skipping malformed link on %s: %s", record.url, e)
                continue
            if not url or not is_valid_url(url):
                continue
            if host_of(url) != self.queue.host:
                continue
            if self.queue.add(url, record.depth + 1):
                added += 1
        return added

    def _pause(self, record: LinkRecord) -> None:
        if self.stop_event.wait(self.config.delay):
            raise CrawlInterrupted(record.url)

    def _fail(self, record: LinkRecord) -> None:
        self.stats.errors += 1
        if not record.status.terminal:
            self.queue.set_error(record)
