from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class PageSnapshot:
    """
    Structured record of one validated fetch of one URL.
    Immutable once created; the store keeps an append-only log per URL.

    Invariants:
    - has_h1 <=> exactly one h1
    - multiple_h1s <=> more than one h1
    - timestamp is a 14-digit UTC YYYYMMDDhhmmss string (sortable as text)
    """
    url: str
    timestamp: str
    raw_html: str
    status_code: Optional[int] = None

    title: str = ""
    has_title: bool = False
    canonical: str = ""
    is_canonical_self_ref: bool = False
    meta_description: str = ""
    has_meta_description: bool = False
    h1: Tuple[str, ...] = field(default_factory=tuple)
    has_h1: bool = False
    multiple_h1s: bool = False

    @property
    def first_h1(self) -> str:
        return self.h1[0] if self.h1 else ""
