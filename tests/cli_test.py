import tempfile
import threading
import time
import unittest
from functools import partial
from pathlib import Path
from unittest.mock import MagicMock, patch

from crawler.backends import FetchBackend
from crawler.fetcher import ExhaustedRetriesError, ResilientFetcher
from crawler.models import FetchResult
from monitor import cli
from snapshots.sqlite_storage import SQLiteSnapshotStore

VALID_HTML = (
    "<!DOCTYPE html><html><head><title>Home</title>"
    '<link rel="canonical" href="https://www.example.com/a">'
    "</head><body><h1>Welcome</h1>"
    + "<p>Lorem ipsum dolor sit amet, consectetur adipiscing elit.</p>" * 25
    + "</body></html>"
)


class InFlightBackend(FetchBackend):
    """Returns a valid page after a short delay and records peak concurrency."""

    def __init__(self):
        self._lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0
        self.closed = False

    def fetch(self, url, render=True, wait_ms=0):
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(0.05)
            return FetchResult(200, VALID_HTML)
        finally:
            with self._lock:
                self.in_flight -= 1

    def close(self):
        self.closed = True


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.urls_file = Path(self.tmpdir.name) / "urls.txt"
        self.urls_file.write_text(
            "https://www.example.com/a\n\n  https://www.example.com/b  \nhttps://www.example.com/c\n",
            encoding="utf-8",
        )

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_read_urls(self):
        self.assertEqual(cli.read_urls(self.urls_file), [
            "https://www.example.com/a",
            "https://www.example.com/b",
            "https://www.example.com/c",
        ])
        self.assertEqual(cli.read_urls(self.urls_file, 2), [
            "https://www.example.com/a",
            "https://www.example.com/b",
        ])
        self.assertEqual(len(cli.read_urls(self.urls_file, 0)), 3)

    def test_parse_args(self):
        args = cli.parse_args(["2", "--urls-file", "x.txt", "--sitemap", "s1", "--sitemap", "s2",
                               "--workers", "4", "--store", "sqlite", "--report", "file"])
        self.assertEqual(args.limit, 2)
        self.assertEqual(args.urls_file, "x.txt")
        self.assertEqual(args.sitemap, ["s1", "s2"])
        self.assertEqual(args.workers, 4)

    @patch("monitor.cli.ResilientFetcher", partial(ResilientFetcher, sleep=lambda seconds: None))
    def test_run_end_to_end(self):
        args = cli.parse_args(["--urls-file", str(self.urls_file), "--sitemap",
                               "https://www.example.com/sitemap.xml", "--store", "sqlite", "--report", "file"])
        backend = MagicMock()

        def fetch(url, render=True, wait_ms=0):
            if url.endswith("sitemap.xml"):
                return FetchResult(200, "<urlset><url><loc>https://www.example.com/d</loc></url>"
                                        "<url><loc>https://www.example.com/a</loc></url></urlset>")
            if url.endswith("/c"):
                return FetchResult(403, "Forbidden")
            return FetchResult(200, VALID_HTML)
        backend.fetch.side_effect = fetch

        store = SQLiteSnapshotStore(":memory:")
        store.close = MagicMock()
        sink = MagicMock()

        report = cli.run(args, backend=backend, store=store, sink=sink)

        self.assertEqual([o.url for o in report.outcomes], [
            "https://www.example.com/a",
            "https://www.example.com/b",
            "https://www.example.com/c",
            "https://www.example.com/d",
        ])
        self.assertEqual([f.url for f in report.failures], ["https://www.example.com/c"])
        self.assertTrue(all(c.first_scrape for c in report.comparisons))
        sink.deliver.assert_called_once_with(report)
        store.close.assert_called_once()
        backend.close.assert_called_once()

    def test_run_closes_resources_on_failure(self):
        args = cli.parse_args(["--urls-file", str(self.urls_file), "--sitemap", "x", "--report", "file"])
        args.sitemap = []
        backend = MagicMock()
        store = MagicMock()
        store.last_n.return_value = []
        sink = MagicMock()
        sink.deliver.side_effect = RuntimeError("SMTP down")

        with patch("monitor.cli.ResilientFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch.side_effect = ExhaustedRetriesError("https://www.example.com/a", 3, None)
            with self.assertRaises(RuntimeError):
                cli.run(args, backend=backend, store=store, sink=sink)

        store.close.assert_called_once()
        backend.close.assert_called_once()
        store.delete_older_than.assert_not_called()

    def test_main_returns_nonzero_on_error(self):
        with patch("monitor.cli.run", side_effect=RuntimeError("boom")):
            self.assertEqual(cli.main(["--report", "file"]), 1)
        with patch("monitor.cli.run"):
            self.assertEqual(cli.main(["--report", "file"]), 0)

    def test_fetch_cap_follows_workers_unless_set(self):
        args = cli.parse_args(["--workers", "4"])
        args.max_fetches = None
        self.assertEqual(cli.fetch_cap(args), 4)

        args.max_fetches = 2
        self.assertEqual(cli.fetch_cap(args), 2)

        args.workers, args.max_fetches = 0, None
        self.assertEqual(cli.fetch_cap(args), 1)

    def test_workers_fetch_in_parallel(self):
        urls_file = Path(self.tmpdir.name) / "many.txt"
        urls_file.write_text("\n".join(f"https://www.example.com/p{i}" for i in range(8)), encoding="utf-8")
        args = cli.parse_args(["--urls-file", str(urls_file), "--workers", "4", "--report", "file"])
        args.sitemap = []
        args.max_fetches = None
        backend = InFlightBackend()

        with patch("monitor.cli.build_backend", return_value=backend):
            report = cli.run(args, store=SQLiteSnapshotStore(":memory:"), sink=MagicMock())

        self.assertEqual(len(report.snapshots), 8)
        self.assertGreater(backend.peak, 1)
        self.assertLessEqual(backend.peak, 4)
        self.assertTrue(backend.closed)

    def test_failing_sink_setup_closes_built_resources(self):
        args = cli.parse_args(["--urls-file", str(self.urls_file), "--report", "email"])
        backend = MagicMock()
        store = MagicMock()

        with patch("monitor.cli.build_backend", return_value=backend), \
                patch("monitor.cli.build_store", return_value=store), \
                patch("monitor.cli.build_sink", side_effect=RuntimeError("SMTP config missing: EMAIL_USER")):
            with self.assertRaises(RuntimeError):
                cli.run(args)

        store.close.assert_called_once()
        backend.close.assert_called_once()
        backend.fetch.assert_not_called()


if __name__ == "__main__":
    unittest.main()
