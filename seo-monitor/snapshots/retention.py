from datetime import datetime, timedelta, timezone
from typing import Optional

from crawler.config import RETENTION_DAYS
from crawler.logger import setup_logger
from crawler.url_utils import format_timestamp

logger = setup_logger("monitor.retention")


def retention_cutoff(days: int = RETENTION_DAYS, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return format_timestamp(now - timedelta(days=days))


def purge_expired(store, days: int = RETENTION_DAYS, now: Optional[datetime] = None) -> int:
    cutoff = retention_cutoff(days, now)
    logger.info(f"[RETENTION] Cleaning up data older than {days} days (cutoff: {cutoff})...")
    deleted = store.delete_older_than(cutoff)
    logger.info(f"[RETENTION] Deleted {deleted} old entries.")
    return deleted
