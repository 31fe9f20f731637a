import json
from abc import ABC, abstractmethod
from typing import List

from snapshots.models import PageSnapshot

# Column order shared by the SQL stores
SNAPSHOT_COLUMNS = (
    "url", "timestamp", "status_code", "raw_html",
    "title", "has_title", "canonical", "is_canonical_self_ref",
    "meta_description", "has_meta_description",
    "h1", "has_h1", "multiple_h1s",
)


class SnapshotStore(ABC):
    """
    Abstract interface for the append-only, per-URL snapshot log.
    """

    @abstractmethod
    def append(self, snapshot: PageSnapshot) -> None:
        """Atomically persist one snapshot (one insert per successful fetch)."""
        pass

    @abstractmethod
    def last_n(self, url: str, n: int) -> List[PageSnapshot]:
        """Most recent `n` snapshots for a URL, newest first."""
        pass

    @abstractmethod
    def delete_older_than(self, cutoff_timestamp: str) -> int:
        """
        Delete snapshots whose timestamp sorts before the cutoff.
        String comparison: timestamps must stay zero-padded 14-digit values.
        Returns the number of deleted rows.
        """
        pass

    @abstractmethod
    def exists(self, url: str, timestamp: str) -> bool:
        """True if a snapshot with this (url, timestamp) is already stored."""
        pass

    @abstractmethod
    def remove_latest(self, count: int) -> int:
        """Delete the `count` most recent snapshots across all URLs."""
        pass

    def close(self) -> None:
        pass


def snapshot_to_row(snapshot: PageSnapshot) -> tuple:
    return (
        snapshot.url, snapshot.timestamp, snapshot.status_code, snapshot.raw_html,
        snapshot.title, int(snapshot.has_title), snapshot.canonical,
        int(snapshot.is_canonical_self_ref), snapshot.meta_description,
        int(snapshot.has_meta_description), json.dumps(list(snapshot.h1)),
        int(snapshot.has_h1), int(snapshot.multiple_h1s),
    )


def row_to_snapshot(row) -> PageSnapshot:
    (url, timestamp, status_code, raw_html, title, has_title, canonical,
     is_self_ref, meta_description, has_meta, h1_json, has_h1, multiple_h1s) = row
    return PageSnapshot(
        url=url,
        timestamp=timestamp,
        status_code=status_code,
        raw_html=raw_html or "",
        title=title or "",
        has_title=bool(has_title),
        canonical=canonical or "",
        is_canonical_self_ref=bool(is_self_ref),
        meta_description=meta_description or "",
        has_meta_description=bool(has_meta),
        h1=tuple(json.loads(h1_json)) if h1_json else (),
        has_h1=bool(has_h1),
        multiple_h1s=bool(multiple_h1s),
    )
