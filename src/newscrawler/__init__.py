"""
Focused news crawler: per-host work queues drained by worker threads that
fetch pages, store articles, skip unchanged content and follow links up to a
depth limit.
"""
from newscrawler.config import CrawlConfig, load_config
from newscrawler.driver import CrawlReport, crawl, crawl_host
from newscrawler.hostqueue import HostQueue, QueueCounts
from newscrawler.models import Article, FetchResponse, LinkRecord, LinkStatus
from newscrawler.worker import Worker, WorkerStats

__version__ = "1.0.0"
__all__ = [
    "Article",
    "CrawlConfig",
    "CrawlReport",
    "FetchResponse",
    "HostQueue",
    "LinkRecord",
    "LinkStatus",
    "QueueCounts",
    "Worker",
    "WorkerStats",
    "crawl",
    "crawl_host",
    "load_config",
]
