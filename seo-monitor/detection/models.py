from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

EMPTY_PLACEHOLDER = "(empty)"


class ChangeType(Enum):
    CONTENT = "content"
    TITLE = "title"
    CANONICAL = "canonical"
    H1 = "h1"
    ROBOTSTXT = "robotstxt"
    NAV_ADDED = "nav_added"
    NAV_REMOVED = "nav_removed"
    NAV_TEXT_CHANGED = "nav_text_changed"


NAV_CHANGE_TYPES = (ChangeType.NAV_REMOVED, ChangeType.NAV_ADDED, ChangeType.NAV_TEXT_CHANGED)
FIELD_CHANGE_TYPES = (ChangeType.TITLE, ChangeType.CANONICAL, ChangeType.H1)


@dataclass(frozen=True)
class NavLink:
    """Same-origin navigation link. Derived from raw HTML, never persisted."""
    url: str
    text: str


@dataclass(frozen=True)
class NavTextChange:
    url: str
    old_text: str
    new_text: str


@dataclass(frozen=True)
class Change:
    """One classified difference between two snapshots. Ephemeral."""
    type: ChangeType


@dataclass(frozen=True)
class ContentChange(Change):
    percent_diff: float
    message: str


@dataclass(frozen=True)
class RobotsTxtChange(Change):
    percent_diff: float
    message: str
    old_content: str
    new_content: str


@dataclass(frozen=True)
class FieldChange(Change):
    """title / canonical / h1. Empty sides are rendered as EMPTY_PLACEHOLDER."""
    old_value: str
    new_value: str


@dataclass(frozen=True)
class NavChange(Change):
    """nav_added / nav_removed carry NavLink, nav_text_changed carries NavTextChange."""
    links: Tuple = field(default_factory=tuple)
