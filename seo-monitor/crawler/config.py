import os
from pathlib import Path
from dotenv import load_dotenv

# Configuration for the SEO monitor.
# This file defines fetch policy, storage, retention and report delivery.
# No parsing or change detection logic here.

load_dotenv(Path(__file__).resolve().parents[2] / '.env')


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name):
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_optional_int(name):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


# Canonical data directory for the monitor (SQLite store lives here)
DATA_DIR = Path(__file__).resolve().parents[1] / 'data'

# === FETCH SECTION ===

SCRAPFLY_API_KEY = os.getenv("SCRAPFLY_API_KEY")
SCRAPFLY_ENDPOINT = os.getenv("SCRAPFLY_ENDPOINT", "https://api.scrapfly.io")

# scrapfly | requests | playwright
FETCH_BACKEND = os.getenv("FETCH_BACKEND", "scrapfly" if SCRAPFLY_API_KEY else "requests")

# Retry policy: fixed delay between attempts, no backoff growth, no jitter
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 3))
RETRY_DELAY_MS = int(os.getenv("RETRY_DELAY_MS", 5000))

RENDER_JS = _env_bool("RENDER_JS", True)
RENDERING_WAIT_MS = int(os.getenv("RENDERING_WAIT_MS", 10000))

# Network timeout for HTTP requests (seconds)
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", 60))

USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36",
)

# Playwright / JS Rendering Waiting Periods (seconds)
JS_GOTO_TIMEOUT = 25
JS_STABILITY_TIME = 2

# === STORAGE SECTION ===

# sqlite | mysql
STORE_BACKEND = os.getenv("STORE_BACKEND", "sqlite")
SQLITE_PATH = Path(os.getenv("SQLITE_PATH", DATA_DIR / "snapshots.db"))

MYSQL_HOST = os.getenv("MYSQL_HOST", "localhost")
MYSQL_PORT = int(os.getenv("MYSQL_PORT", 3306))
MYSQL_USER = os.getenv("MYSQL_USER")
MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD")
MYSQL_DATABASE = os.getenv("MYSQL_DATABASE", "seo_monitor")

RETENTION_DAYS = int(os.getenv("RETENTION_DAYS", 30))

# === RUN SECTION ===

URLS_FILE = os.getenv("URLS_FILE", "urls.txt")

# Sitemaps to monitor, e.g. https://www.example.com/sitemap_index.xml
SITEMAP_URLS = _env_list("SITEMAP_URLS")

# 1 = strictly sequential processing
MAX_WORKERS = int(os.getenv("MAX_WORKERS", 1))
# Cap on in-flight fetches across workers; unset = one per worker
MAX_CONCURRENT_FETCHES = _env_optional_int("MAX_CONCURRENT_FETCHES")

# === REPORT SECTION ===

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", 465))
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASS = os.getenv("EMAIL_PASS")
REPORT_RECIPIENTS = _env_list("REPORT_RECIPIENTS")
REPORT_DIR = Path(os.getenv("REPORT_DIR", "reports"))

LOG_FILE = os.getenv("LOG_FILE")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
