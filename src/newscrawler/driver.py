"""
Spins up one queue and worker set per target host.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from newscrawler.config import CrawlConfig
from newscrawler.fetch import Fetcher, HttpFetcher
from newscrawler.history import history_path, load_history, save_history
from newscrawler.hostqueue import HostQueue, QueueCounts
from newscrawler.models import LinkRecord
from newscrawler.parsers import MetaArticleParser
from newscrawler.storage import MemorySink, StorageSink
from newscrawler.urls import host_of, normalize_url
from newscrawler.worker import POLL_INTERVAL, Worker, WorkerStats

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CrawlReport:
    """Outcome of crawling one host."""
    host: str
    counts: QueueCounts
    workers: List[WorkerStats] = field(default_factory=list)
    records: List[LinkRecord] = field(default_factory=list)
    # Set when the host could not be crawled at all
    error: Optional[str] = None

    @property
    def articles(self) -> int:
        return sum(w.articles for w in self.workers)

    @property
    def unchanged(self) -> int:
        return sum(w.unchanged for w in self.workers)


def build_fetcher(config: CrawlConfig) -> HttpFetcher:
    return HttpFetcher(
        parser=MetaArticleParser(min_text_length=config.min_text_length),
        user_agent=config.user_agent,
        referrer=config.referrer,
    )


def crawl_host(
    seeds: Union[str, Iterable[str]],
    config: CrawlConfig,
    fetcher: Fetcher,
    sink: StorageSink,
    history: Optional[Iterable[LinkRecord]] = None,
    stop_event: Optional[threading.Event] = None,
) -> CrawlReport:
    """
    Crawl one host to exhaustion with ``config.workers_per_host`` threads.

    All seeds must share a host. When ``history`` is given, the queue is
    restored from it so pages unchanged since the last run are not re-parsed.
    """
    if isinstance(seeds, str):
        seeds = [seeds]
    urls = []
    for seed in seeds:
        url = normalize_url(seed)
        if not url:
            raise ValueError(f"Invalid seed URL: {seed}")
        urls.append(url)
    if not urls:
        raise ValueError("No seed URLs given")

    host = host_of(urls[0])
    if any(host_of(u) != host for u in urls):
        raise ValueError(f"Seeds span several hosts: {', '.join(urls)}")

    queue = HostQueue.restore(host, history) if history else HostQueue(host)
    for url in urls:
        queue.add(url, 0)

    stop_event = stop_event or threading.Event()
    workers = [
        Worker(queue, fetcher, sink, config, stop_event=stop_event, name=f"worker-{host}-{i}")
        for i in range(config.workers_per_host)
    ]
    threads = [threading.Thread(target=w.run, name=w.name, daemon=True) for w in workers]
    for t in threads:
        t.start()
    for t in threads:
        while t.is_alive():
            t.join(POLL_INTERVAL)
            if stop_event.is_set():
                queue.close()

    counts = queue.counts()
    logger.info(
        "Finished %s: %d visited, %d errors, %d pending",
        host, counts.visited, counts.error, counts.pending,
    )
    return CrawlReport(
        host=host,
        counts=counts,
        workers=[w.stats for w in workers],
        records=queue.records(),
    )


def group_by_host(seeds: Iterable[str]) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for seed in seeds:
        url = normalize_url(seed)
        if not url:
            raise ValueError(f"Invalid seed URL: {seed}")
        grouped.setdefault(host_of(url), []).append(url)
    return grouped


def crawl(
    seeds: Iterable[str],
    config: CrawlConfig,
    fetcher: Optional[Fetcher] = None,
    sink: Optional[StorageSink] = None,
    history_dir: Optional[Union[str, Path]] = None,
    stop_event: Optional[threading.Event] = None,
) -> List[CrawlReport]:
    """Crawl every seed host in parallel, one queue per host."""
    grouped = group_by_host(seeds)
    own_fetcher = fetcher is None
    fetcher = fetcher or build_fetcher(config)
    sink = sink if sink is not None else MemorySink()
    stop_event = stop_event or threading.Event()

    reports: Dict[str, CrawlReport] = {}
    lock = threading.Lock()

    def run_host(host: str, urls: List[str]) -> None:
        try:
            history = load_history(history_path(history_dir, host)) if history_dir else None
            report = crawl_host(urls, config, fetcher, sink, history=history, stop_event=stop_event)
        except Exception as e:
            logger.exception("Crawl of %s failed", host)
            report = CrawlReport(host=host, counts=QueueCounts(0, 0, 0, 0, 0), error=str(e) or type(e).__name__)
            with lock:
                reports[host] = report
            return
        if history_dir:
            try:
                save_history(history_path(history_dir, host), report.records)
            except OSError as e:
                logger.error("Failed to write history for %s: %s", host, e)
        with lock:
            reports[host] = report

    threads = [
        threading.Thread(target=run_host, args=(host, urls), name=f"host-{host}", daemon=True)
        for host, urls in grouped.items()
    ]
    for t in threads:
        t.start()
    try:
        for t in threads:
            while t.is_alive():
                t.join(POLL_INTERVAL)
    except KeyboardInterrupt:
        logger.warning("Interrupted, stopping workers")
        stop_event.set()
        for t in threads:
            t.join()
    finally:
        if own_fetcher:
            fetcher.close()

    return [reports[h] for h in grouped if h in reports]
