import threading
from typing import List

import pymysql

from crawler.config import MYSQL_DATABASE, MYSQL_HOST, MYSQL_PASSWORD, MYSQL_PORT, MYSQL_USER
from crawler.logger import setup_logger
from snapshots.models import PageSnapshot
from snapshots.storage import SNAPSHOT_COLUMNS, SnapshotStore, row_to_snapshot, snapshot_to_row

logger = setup_logger("monitor.store")


class MySQLSnapshotStore(SnapshotStore):
    """
    MySQL implementation of SnapshotStore.
    Writes to 'page_snapshots' (one row per validated fetch).

    pymysql connections are not thread-safe: the single connection is shared
    by all workers and every statement (with its commit) runs under the lock.
    """

    def __init__(self, connection_pool):
        self._pool = connection_pool
        self._lock = threading.Lock()

    @classmethod
    def connect(cls):
        connection = pymysql.connect(
            host=MYSQL_HOST,
            port=MYSQL_PORT,
            user=MYSQL_USER,
            password=MYSQL_PASSWORD,
            database=MYSQL_DATABASE,
            charset="utf8mb4",
        )
        return cls(connection)

    def append(self, snapshot: PageSnapshot) -> None:
        placeholders = ", ".join("%s" for _ in SNAPSHOT_COLUMNS)
        sql = f"INSERT INTO page_snapshots ({', '.join(SNAPSHOT_COLUMNS)}) VALUES ({placeholders})"
        with self._lock, self._pool.cursor() as cursor:
            cursor.execute(sql, snapshot_to_row(snapshot))
            self._pool.commit()
        logger.info(f"[STORE] Appended snapshot {snapshot.timestamp}", extra={"context": snapshot.url})

    def last_n(self, url: str, n: int) -> List[PageSnapshot]:
        sql = f"""
            SELECT {', '.join(SNAPSHOT_COLUMNS)} FROM page_snapshots
            WHERE url = %s
            ORDER BY timestamp DESC, id DESC
            LIMIT %s
        """
        with self._lock, self._pool.cursor() as cursor:
            cursor.execute(sql, (url, n))
            rows = cursor.fetchall()
        return [row_to_snapshot(row) for row in rows]

    def delete_older_than(self, cutoff_timestamp: str) -> int:
        with self._lock, self._pool.cursor() as cursor:
            deleted = cursor.execute(
                "DELETE FROM page_snapshots WHERE timestamp < %s", (cutoff_timestamp,)
            )
            self._pool.commit()
        return deleted

    def exists(self, url: str, timestamp: str) -> bool:
        with self._lock, self._pool.cursor() as cursor:
            cursor.execute(
                "SELECT 1 FROM page_snapshots WHERE url = %s AND timestamp = %s LIMIT 1",
                (url, timestamp),
            )
            return cursor.fetchone() is not None

    def remove_latest(self, count: int) -> int:
        if count <= 0:
            return 0
        with self._lock, self._pool.cursor() as cursor:
            cursor.execute(
                "SELECT id FROM page_snapshots ORDER BY timestamp DESC, id DESC LIMIT %s",
                (count,),
            )
            ids = [row[0] for row in cursor.fetchall()]
            if not ids:
                return 0
            placeholders = ", ".join("%s" for _ in ids)
            deleted = cursor.execute(f"DELETE FROM page_snapshots WHERE id IN ({placeholders})", ids)
            self._pool.commit()
        return deleted

    def close(self) -> None:
        with self._lock:
            self._pool.close()
