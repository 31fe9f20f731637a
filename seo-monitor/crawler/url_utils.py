from datetime import datetime, timezone
from urllib.parse import urlparse

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def looks_like_url(text: str) -> bool:
    """True only for absolute http(s) URLs."""
    if not text:
        return False
    try:
        parsed = urlparse(text.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_robots_txt(url: str) -> bool:
    if not url:
        return False
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return path.lower().endswith("/robots.txt")


def is_root_path(url: str) -> bool:
    try:
        return urlparse(url).path in ("", "/")
    except ValueError:
        return False


def strip_trailing_slash(url: str) -> str:
    """
    Removes a single trailing slash.
    No scheme or host normalization: 'https://A.com/x//' -> 'https://A.com/x/'.
    """
    return url[:-1] if url.endswith("/") else url


def format_timestamp(dt: datetime) -> str:
    """14-digit, zero-padded UTC timestamp (YYYYMMDDhhmmss)."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(TIMESTAMP_FORMAT)


def utc_timestamp() -> str:
    return format_timestamp(datetime.now(timezone.utc))
