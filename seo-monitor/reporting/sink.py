from abc import ABC, abstractmethod
from pathlib import Path

from crawler.config import REPORT_DIR
from crawler.logger import setup_logger
from monitor.models import RunReport
from reporting.report import generate_report

logger = setup_logger("monitor.report")


class ReportSink(ABC):
    """
    Abstract interface for delivering a finished run.
    Delivery failures are not retried and propagate to the caller.
    """

    @abstractmethod
    def deliver(self, report: RunReport) -> None:
        pass


class FileReportSink(ReportSink):
    """Writes the rendered report to <report_dir>/latest_report.html."""

    def __init__(self, report_dir=REPORT_DIR):
        self._report_dir = Path(report_dir)

    def deliver(self, report: RunReport) -> None:
        rendered = generate_report(report)
        self._report_dir.mkdir(parents=True, exist_ok=True)
        path = self._report_dir / "latest_report.html"
        path.write_text(
            f"<!DOCTYPE html>\n<html><head><meta charset=\"UTF-8\"><title>{rendered.subject}</title></head>"
            f"<body>{rendered.html}</body></html>\n",
            encoding="utf-8",
        )
        logger.info(f"[REPORT] {rendered.subject} -> {path}")
