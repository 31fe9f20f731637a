from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from crawler.fetcher import ExhaustedRetriesError
from crawler.logger import setup_logger
from crawler.url_utils import utc_timestamp
from detection.engine import VersionComparator
from monitor.models import Comparison, RunReport, ScrapeOutcome, UrlResult
from snapshots.parser import parse

logger = setup_logger("monitor.run")


class MonitorRun:
    """
    Ties fetch -> parse -> store -> compare together for each monitored URL.

    Invariants:
    - Only validated snapshots are stored or compared.
    - Retry exhaustion is captured per URL and never aborts sibling URLs.
    - Store errors are not retried here; they propagate to the caller.
    - Each URL's comparison depends only on its own two latest snapshots, so
      results are identical for sequential and threaded runs.
    """

    def __init__(self, fetcher, store, comparator: Optional[VersionComparator] = None,
                 clock: Callable[[], str] = utc_timestamp):
        self._fetcher = fetcher
        self._store = store
        self._comparator = comparator or VersionComparator()
        self._clock = clock

    def scrape(self, url: str) -> ScrapeOutcome:
        try:
            result = self._fetcher.fetch(url)
        except ExhaustedRetriesError as e:
            logger.error(f"Failed to scrape after all retries: {e}", extra={"context": url})
            return ScrapeOutcome(url=url, error=str(e))

        snapshot = parse(result.body, url, self._clock(), result.status_code)
        return ScrapeOutcome(url=url, snapshot=snapshot)

    def compare_latest(self, url: str) -> Optional[Comparison]:
        versions = self._store.last_n(url, 2)

        if len(versions) == 2:
            newer, older = versions
            changes = self._comparator.compare(older, newer)
            if changes:
                logger.warning(f"[COMPARE] {len(changes)} change(s) detected", extra={"context": url})
                return Comparison(url=url, changes=tuple(changes))
            logger.info("[COMPARE] UNCHANGED", extra={"context": url})
            return None

        if len(versions) == 1:
            logger.info("[COMPARE] First scrape, no previous version to compare", extra={"context": url})
            return Comparison(url=url, first_scrape=True)

        return None

    def process_url(self, url: str) -> UrlResult:
        outcome = self.scrape(url)
        if not outcome.ok:
            return UrlResult(outcome)

        self._store.append(outcome.snapshot)
        logger.info("Successfully processed", extra={"context": url})
        return UrlResult(outcome, self.compare_latest(url))

    def run(self, urls: Sequence[str], max_workers: int = 1) -> RunReport:
        """
        Process every URL and fold the results in input order.
        max_workers=1 keeps processing strictly sequential.
        """
        logger.info(f"Monitoring {len(urls)} URL(s) with {max_workers} worker(s)")

        if max_workers <= 1:
            results = [self.process_url(url) for url in urls]
        else:
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Monitor") as pool:
                results = list(pool.map(self.process_url, urls))

        report = RunReport.fold(results)
        logger.info(
            f"Run finished: {len(report.snapshots)} scraped, {len(report.failures)} failed, "
            f"{len(report.comparisons)} comparison(s)"
        )
        for failure in report.failures:
            logger.warning(f"  - {failure.url}: {failure.error}")
        return report
