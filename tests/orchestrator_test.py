import itertools
import threading
import unittest
from unittest.mock import MagicMock

from crawler.fetcher import ExhaustedRetriesError, ForbiddenError
from crawler.models import FetchResult
from detection.models import ChangeType
from monitor.models import Comparison, RunReport, ScrapeOutcome, UrlResult
from monitor.orchestrator import MonitorRun
from snapshots.sqlite_storage import SQLiteSnapshotStore

A = "https://www.example.com/a"
B = "https://www.example.com/b"
C = "https://www.example.com/c"


def page(title="Title", h1="Heading"):
    return (f"<html><head><title>{title}</title></head>"
            f"<body><h1>{h1}</h1><p>{'word ' * 200}</p></body></html>")


def clock():
    counter = itertools.count(1)
    lock = threading.Lock()

    def tick():
        with lock:
            return f"202501010000{next(counter):02d}"
    return tick


class TestMonitorRun(unittest.TestCase):

    def setUp(self):
        self.store = SQLiteSnapshotStore(":memory:")
        self.fetcher = MagicMock()
        self.pages = {A: page(), B: page(), C: page()}
        self.fetcher.fetch.side_effect = lambda url: FetchResult(200, self.pages[url])
        self.monitor = MonitorRun(self.fetcher, self.store, clock=clock())

    def tearDown(self):
        self.store.close()

    def test_first_scrape(self):
        report = self.monitor.run([A])

        self.assertEqual(len(report.snapshots), 1)
        self.assertEqual(report.snapshots[0].title, "Title")
        self.assertEqual(report.snapshots[0].status_code, 200)
        self.assertEqual(report.comparisons, (Comparison(url=A, first_scrape=True),))
        self.assertEqual(report.failures, ())

    def test_unchanged_page_has_no_comparison(self):
        self.monitor.run([A])
        report = self.monitor.run([A])

        self.assertEqual(report.comparisons, ())
        self.assertEqual(len(self.store.last_n(A, 10)), 2)

    def test_changes_are_reported(self):
        self.monitor.run([A])
        self.pages[A] = page(title="New Title")

        report = self.monitor.run([A])

        self.assertEqual(len(report.comparisons), 1)
        comparison = report.comparisons[0]
        self.assertFalse(comparison.first_scrape)
        self.assertEqual([c.type for c in comparison.changes], [ChangeType.TITLE])
        self.assertEqual(comparison.changes[0].old_value, "Title")
        self.assertEqual(comparison.changes[0].new_value, "New Title")

    def test_failure_is_isolated(self):
        def fetch(url):
            if url == B:
                raise ExhaustedRetriesError(url, 3, ForbiddenError(url))
            return FetchResult(200, self.pages[url])
        self.fetcher.fetch.side_effect = fetch

        report = self.monitor.run([A, B, C])

        self.assertEqual([o.url for o in report.outcomes], [A, B, C])
        self.assertEqual(len(report.failures), 1)
        self.assertEqual(report.failures[0].url, B)
        self.assertIn("403 Forbidden", report.failures[0].error)
        self.assertEqual([s.url for s in report.snapshots], [A, C])
        self.assertEqual(self.store.last_n(B, 2), [])

    def test_threaded_run_matches_input_order(self):
        urls = [A, B, C]
        sequential = self.monitor.run(urls)
        threaded = self.monitor.run(urls, max_workers=3)

        self.assertEqual([o.url for o in threaded.outcomes], urls)
        self.assertEqual([c.url for c in sequential.comparisons], urls)
        self.assertEqual(threaded.comparisons, ())
        self.assertEqual(self.fetcher.fetch.call_count, 6)

    def test_store_errors_propagate(self):
        store = MagicMock()
        store.append.side_effect = RuntimeError("disk full")
        monitor = MonitorRun(self.fetcher, store, clock=clock())

        with self.assertRaises(RuntimeError):
            monitor.run([A])

    def test_only_latest_two_versions_are_compared(self):
        store = MagicMock()
        newer = MagicMock(url=A)
        older = MagicMock(url=A)
        store.last_n.return_value = [newer, older]
        comparator = MagicMock()
        comparator.compare.return_value = []

        MonitorRun(self.fetcher, store, comparator=comparator, clock=clock()).run([A])

        store.last_n.assert_called_once_with(A, 2)
        comparator.compare.assert_called_once_with(older, newer)


class TestRunModels(unittest.TestCase):

    def test_outcome_needs_exactly_one_side(self):
        with self.assertRaises(ValueError):
            ScrapeOutcome(url=A)
        with self.assertRaises(ValueError):
            ScrapeOutcome(url=A, snapshot=MagicMock(), error="boom")
        self.assertFalse(ScrapeOutcome(url=A, error="boom").ok)

    def test_fold_keeps_order_and_skips_missing_comparisons(self):
        failed = ScrapeOutcome(url=B, error="boom")
        ok = ScrapeOutcome(url=A, snapshot=MagicMock())
        comparison = Comparison(url=A, first_scrape=True)

        report = RunReport.fold([UrlResult(ok, comparison), UrlResult(failed)])

        self.assertEqual(report.outcomes, (ok, failed))
        self.assertEqual(report.comparisons, (comparison,))
        self.assertEqual(report.failures, (failed,))


if __name__ == "__main__":
    unittest.main()
