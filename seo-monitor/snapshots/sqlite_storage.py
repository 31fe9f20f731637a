"""
SQLite implementation of the snapshot log.
Default local store; the schema is created on open.
"""

import sqlite3
import threading
from pathlib import Path
from typing import List

from crawler.logger import setup_logger
from snapshots.models import PageSnapshot
from snapshots.storage import SNAPSHOT_COLUMNS, SnapshotStore, row_to_snapshot, snapshot_to_row

logger = setup_logger("monitor.store")

SCHEMA = """
CREATE TABLE IF NOT EXISTS page_snapshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL,
    timestamp CHAR(14) NOT NULL,   -- YYYYMMDDhhmmss, UTC
    status_code INTEGER,
    raw_html TEXT NOT NULL,
    title TEXT NOT NULL,
    has_title INTEGER NOT NULL,
    canonical TEXT NOT NULL,
    is_canonical_self_ref INTEGER NOT NULL,
    meta_description TEXT NOT NULL,
    has_meta_description INTEGER NOT NULL,
    h1 TEXT NOT NULL,              -- JSON array
    has_h1 INTEGER NOT NULL,
    multiple_h1s INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_page_snapshots_url_ts ON page_snapshots (url, timestamp);
CREATE INDEX IF NOT EXISTS idx_page_snapshots_ts ON page_snapshots (timestamp);
"""


class SQLiteSnapshotStore(SnapshotStore):

    def __init__(self, path):
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        # Shared across worker threads; every statement runs under the lock
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock:
            self._conn.executescript(SCHEMA)
            self._conn.commit()

    def append(self, snapshot: PageSnapshot) -> None:
        placeholders = ", ".join("?" for _ in SNAPSHOT_COLUMNS)
        sql = f"INSERT INTO page_snapshots ({', '.join(SNAPSHOT_COLUMNS)}) VALUES ({placeholders})"
        with self._lock:
            self._conn.execute(sql, snapshot_to_row(snapshot))
            self._conn.commit()
        logger.info(f"[STORE] Appended snapshot {snapshot.timestamp}", extra={"context": snapshot.url})

    def last_n(self, url: str, n: int) -> List[PageSnapshot]:
        sql = f"""
            SELECT {', '.join(SNAPSHOT_COLUMNS)} FROM page_snapshots
            WHERE url = ?
            ORDER BY timestamp DESC, id DESC
            LIMIT ?
        """
        with self._lock:
            rows = self._conn.execute(sql, (url, n)).fetchall()
        return [row_to_snapshot(row) for row in rows]

    def delete_older_than(self, cutoff_timestamp: str) -> int:
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM page_snapshots WHERE timestamp < ?", (cutoff_timestamp,)
            )
            self._conn.commit()
            return cursor.rowcount

    def exists(self, url: str, timestamp: str) -> bool:
        with self._lock:
            row = self._conn.execute(
                "SELECT 1 FROM page_snapshots WHERE url = ? AND timestamp = ? LIMIT 1",
                (url, timestamp),
            ).fetchone()
        return row is not None

    def remove_latest(self, count: int) -> int:
        if count <= 0:
            return 0
        with self._lock:
            cursor = self._conn.execute(
                """
                DELETE FROM page_snapshots WHERE id IN (
                    SELECT id FROM page_snapshots ORDER BY timestamp DESC, id DESC LIMIT ?
                )
                """,
                (count,),
            )
            self._conn.commit()
            return cursor.rowcount

    def close(self) -> None:
        with self._lock:
            self._conn.close()
