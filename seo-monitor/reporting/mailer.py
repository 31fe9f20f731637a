import smtplib
from email.message import EmailMessage
from typing import Sequence

from crawler.config import EMAIL_PASS, EMAIL_USER, REPORT_RECIPIENTS, SMTP_HOST, SMTP_PORT
from crawler.logger import setup_logger
from monitor.models import RunReport
from reporting.report import generate_report
from reporting.sink import ReportSink

logger = setup_logger("monitor.report")


class EmailReportSink(ReportSink):
    """
    Sends the HTML report over SMTP with implicit TLS (port 465 by default).

    Env vars used:
      - SMTP_HOST / SMTP_PORT
      - EMAIL_USER / EMAIL_PASS
      - REPORT_RECIPIENTS (comma separated)
    """

    def __init__(self, recipients: Sequence[str] = REPORT_RECIPIENTS, host: str = SMTP_HOST,
                 port: int = SMTP_PORT, user: str = EMAIL_USER, password: str = EMAIL_PASS):
        missing = []
        if not user: missing.append("EMAIL_USER")
        if not password: missing.append("EMAIL_PASS")
        if not recipients: missing.append("REPORT_RECIPIENTS")
        if missing:
            raise RuntimeError(f"SMTP config missing: {', '.join(missing)}")

        self._recipients = list(recipients)
        self._host = host
        self._port = port
        self._user = user
        self._password = password

    def build_message(self, report: RunReport) -> EmailMessage:
        rendered = generate_report(report)
        msg = EmailMessage()
        msg["From"] = f'"SEO Monitor" <{self._user}>'
        msg["To"] = ", ".join(self._recipients)
        msg["Subject"] = rendered.subject
        msg.set_content("This report requires an HTML capable mail client.")
        msg.add_alternative(rendered.html, subtype="html")
        return msg

    def deliver(self, report: RunReport) -> None:
        msg = self.build_message(report)
        with smtplib.SMTP_SSL(self._host, self._port, timeout=30) as smtp:
            smtp.login(self._user, self._password)
            smtp.send_message(msg)
        logger.info(f"[REPORT] Email sent: {msg['Subject']} -> {msg['To']}")
