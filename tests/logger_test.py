import logging
import unittest

from crawler.logger import CompanyFormatter, setup_logger


def record(name, msg="hello", **extra):
    rec = logging.LogRecord(name, logging.WARNING, __file__, 1, msg, None, None)
    rec.created = 0
    for key, value in extra.items():
        setattr(rec, key, value)
    return rec


class TestCompanyFormatter(unittest.TestCase):

    def setUp(self):
        self.formatter = CompanyFormatter()

    def test_url_context(self):
        line = self.formatter.format(record("monitor.fetch", context="https://www.example.com/"))
        self.assertEqual(line, "[ Thu Jan 01 12:00:00 AM UTC 1970 ] : WARNING : https://www.example.com/ : hello")

    def test_component_fallback(self):
        self.assertIn(" : fetch : ", self.formatter.format(record("monitor.fetch")))
        self.assertIn(" : root : ", self.formatter.format(record("monitor")))

    def test_component_loggers_share_root_handlers(self):
        child = setup_logger("monitor.test")
        self.assertEqual(child.handlers, [])
        self.assertTrue(child.propagate)
        self.assertTrue(logging.getLogger("monitor").handlers)


if __name__ == "__main__":
    unittest.main()
