"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from newscrawler.config import CrawlConfig, load_config
from newscrawler.driver import CrawlReport, crawl
from newscrawler.errors import ConfigError
from newscrawler.storage import JsonLinesSink, StreamSink

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool, quiet: bool) -> None:
    if logging.getLogger().handlers:
        return
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s",
        stream=sys.stderr,
    )


def print_summary(reports: List[CrawlReport]) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    if not reports:
        sys.stderr.write("No hosts crawled.\n\n")
        return

    for report in reports:
        if report.error:
            sys.stderr.write(f"{report.host}\n  FAILED: {report.error}\n\n")
            continue
        c = report.counts
        sys.stderr.write(f"{report.host}\n")
        sys.stderr.write(f"  Links known:        {c.known}\n")
        sys.stderr.write(f"  Visited:            {c.visited}\n")
        sys.stderr.write(f"  Errors:             {c.error}\n")
        sys.stderr.write(f"  Articles stored:    {report.articles}\n")
        sys.stderr.write(f"  Unchanged pages:    {report.unchanged}\n\n")


def generate_output_path(seed: str) -> Path:
    """Generate output path: crawls/{hostname}_{datetime}.jsonl"""
    parsed = urlparse(seed)
    hostname = parsed.hostname or "unknown"
    # Sanitize hostname for filename (replace dots with underscores)
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    crawls_dir = Path("crawls")
    crawls_dir.mkdir(exist_ok=True)

    return crawls_dir / f"{hostname_safe}_{timestamp}.jsonl"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl news sites from seed URLs and store the articles found."
    )
    parser.add_argument("seeds", nargs="*", help="Seed URLs (e.g. https://news.example/)")
    parser.add_argument("--config", help="YAML config file with 'crawler' settings and 'seeds'")
    parser.add_argument("--depth", type=int, help="Maximum link depth from the seed")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--delay", type=float, help="Pause between requests of one worker, in seconds")
    parser.add_argument("--workers", type=int, help="Worker threads per host")
    parser.add_argument("--archive", help="Directory to archive each article as JSON")
    parser.add_argument("--user-agent", help="User-Agent header")
    parser.add_argument("--history", help="Directory holding per-host crawl history")
    parser.add_argument("--out", help="JSON lines output file for articles, or '-' for stdout (default: auto-generated in crawls/)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        if args.config:
            config, seeds = load_config(args.config)
        else:
            config, seeds = CrawlConfig(), []
        config = config.with_overrides(
            max_depth=args.depth,
            timeout=args.timeout,
            delay=args.delay,
            workers_per_host=args.workers,
            archive_path=args.archive,
            user_agent=args.user_agent,
        )
    except ConfigError as e:
        sys.stderr.write(f"Configuration error: {e}\n")
        return 2

    seeds = list(args.seeds) + [s for s in seeds if s not in args.seeds]
    if not seeds:
        parser.error("at least one seed URL is required (argument or --config)")

    if args.out == "-":
        sink = StreamSink(sys.stdout)
    elif args.out:
        sink = JsonLinesSink(args.out)
    else:
        sink = JsonLinesSink(generate_output_path(seeds[0]))
        logger.info("Writing articles to %s", sink.path)

    try:
        reports = crawl(seeds, config, sink=sink, history_dir=args.history)
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 2

    if not args.quiet:
        print_summary(reports)
    return 1 if any(r.error for r in reports) else 0


if __name__ == "__main__":
    raise SystemExit(main())
