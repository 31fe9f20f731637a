"""
Command line entry point for a monitoring run.
Reads the URL list, optionally merges sitemap URLs, runs fetch -> parse ->
store -> compare for every URL, delivers the report and purges old data.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from crawler import config
from crawler.backends import ThrottledFetchBackend, build_backend
from crawler.fetcher import ResilientFetcher
from crawler.logger import logger
from crawler.sitemap import fetch_sitemap_urls, merge_urls
from monitor.orchestrator import MonitorRun
from snapshots.retention import purge_expired


def read_urls(path, limit: Optional[int] = None) -> List[str]:
    """One URL per line; blank lines dropped. A positive limit keeps the first N."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    urls = [line.strip() for line in lines if line.strip()]
    if limit is not None and limit > 0:
        logger.info(f"Limiting scrape to first {limit} URLs as requested.")
        urls = urls[:limit]
    return urls


def build_store(name: str):
    if name == "sqlite":
        from snapshots.sqlite_storage import SQLiteSnapshotStore
        return SQLiteSnapshotStore(config.SQLITE_PATH)
    if name == "mysql":
        from snapshots.mysql_storage import MySQLSnapshotStore
        return MySQLSnapshotStore.connect()
    raise ValueError(f"Unknown store backend: {name!r}")


def build_sink(name: str):
    if name == "email":
        from reporting.mailer import EmailReportSink
        return EmailReportSink()
    if name == "file":
        from reporting.sink import FileReportSink
        return FileReportSink(config.REPORT_DIR)
    raise ValueError(f"Unknown report sink: {name!r}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="SEO change monitor")
    parser.add_argument("limit", nargs="?", type=int, default=None,
                        help="Only scrape the first N URLs of the URL file")
    parser.add_argument("--urls-file", default=config.URLS_FILE)
    parser.add_argument("--sitemap", action="append", default=None,
                        help="Sitemap URL to merge in (repeatable)")
    parser.add_argument("--workers", type=int, default=config.MAX_WORKERS)
    parser.add_argument("--max-fetches", type=int, default=config.MAX_CONCURRENT_FETCHES,
                        help="Cap on in-flight fetches (defaults to --workers)")
    parser.add_argument("--store", choices=["sqlite", "mysql"], default=config.STORE_BACKEND)
    parser.add_argument("--backend", choices=["scrapfly", "requests", "playwright"],
                        default=config.FETCH_BACKEND)
    parser.add_argument("--retention-days", type=int, default=config.RETENTION_DAYS)
    parser.add_argument("--report", choices=["email", "file"],
                        default="email" if config.REPORT_RECIPIENTS else "file")
    return parser.parse_args(argv)


def fetch_cap(args) -> int:
    """Explicit --max-fetches / MAX_CONCURRENT_FETCHES wins, otherwise one fetch per worker."""
    cap = args.max_fetches if args.max_fetches is not None else args.workers
    return max(1, cap)


def run(args, backend=None, store=None, sink=None):
    urls = read_urls(args.urls_file, args.limit)

    try:
        if backend is None:
            backend = ThrottledFetchBackend(build_backend(args.backend), fetch_cap(args))
        if store is None:
            store = build_store(args.store)
        if sink is None:
            sink = build_sink(args.report)

        sitemaps = args.sitemap if args.sitemap is not None else config.SITEMAP_URLS
        if sitemaps:
            logger.info("Fetching URLs from sitemaps...")
            sitemap_urls = fetch_sitemap_urls(sitemaps, backend)
            if sitemap_urls:
                urls = merge_urls(urls, sitemap_urls)
                logger.info(f"Total unique URLs to monitor: {len(urls)}")

        fetcher = ResilientFetcher(backend)
        report = MonitorRun(fetcher, store).run(urls, max_workers=args.workers)

        sink.deliver(report)
        purge_expired(store, args.retention_days)
        return report
    finally:
        # Close whatever was built, even if a later collaborator failed
        if store is not None:
            store.close()
            logger.info("Store connection closed")
        if backend is not None:
            backend.close()


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        run(args)
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
