"""
Backfill the snapshot log from saved page sources.

File names follow <host with dots as underscores>__<YYYYMMDDhhmmss>.html,
e.g. www_example_com__20250101093000.html -> https://www.example.com
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from crawler.logger import setup_logger
from snapshots.parser import parse

logger = setup_logger("monitor.import")

_FILENAME = re.compile(r"^(?P<host>.+?)__(?P<timestamp>\d{14})\.html$")


def parse_source_filename(filename: str) -> Optional[Tuple[str, str]]:
    """Returns (url, timestamp) or None for files that do not follow the pattern."""
    match = _FILENAME.match(filename)
    if not match:
        return None
    url = "https://" + match.group("host").replace("_", ".")
    return url, match.group("timestamp")


def import_page_sources(directory, store, today: Optional[str] = None) -> int:
    """
    Insert every saved page not already stored.
    Files dated today are skipped; today's run produces those itself.
    """
    today = today or datetime.now(timezone.utc).strftime("%Y%m%d")
    inserted = 0

    for path in sorted(Path(directory).iterdir()):
        parsed = parse_source_filename(path.name)
        if parsed is None:
            continue
        url, timestamp = parsed

        if timestamp[:8] == today:
            continue
        if store.exists(url, timestamp):
            continue

        html = path.read_text(encoding="utf-8", errors="replace")
        store.append(parse(html, url, timestamp))
        inserted += 1
        logger.info(f"Inserted: {url} ({timestamp})")

    return inserted
