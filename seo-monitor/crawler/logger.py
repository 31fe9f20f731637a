import logging
import sys
from datetime import datetime, timezone

from crawler.config import LOG_FILE, LOG_LEVEL

ROOT_LOGGER = "monitor"


class CompanyFormatter(logging.Formatter):
    """
    Company log line format:
    [ Tue Jan 06 05:32:41 AM UTC 2026 ] : INFO : https://www.example.com/ : Message

    The context column is the URL being processed (extra={"context": url}),
    falling back to the component name (monitor.fetch -> fetch).
    """
    def format(self, record):
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, "context", None) or _component(record.name)

        line = f"[ {stamp} ] : {record.levelname} : {context} : {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _component(name):
    if name.startswith(ROOT_LOGGER + "."):
        return name[len(ROOT_LOGGER) + 1:]
    return "root"


def setup_logger(name=ROOT_LOGGER, log_file=None, level=LOG_LEVEL):
    """
    Returns the named logger. Handlers live on the 'monitor' logger only;
    component loggers (monitor.fetch, monitor.store, ...) propagate to it.
    """
    logger = logging.getLogger(name)

    if name != ROOT_LOGGER:
        setup_logger(ROOT_LOGGER, log_file=log_file, level=level)
        return logger

    # Already configured
    if logger.handlers:
        return logger

    logger.setLevel(level)
    formatter = CompanyFormatter()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logger(log_file=LOG_FILE)
