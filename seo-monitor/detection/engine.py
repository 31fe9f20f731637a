from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from crawler.url_utils import is_robots_txt
from detection.models import (
    EMPTY_PLACEHOLDER,
    Change,
    ChangeType,
    ContentChange,
    FieldChange,
    RobotsTxtChange,
)
from detection.navigation import DEFAULT_NAV_LOCATORS, NavLocator, diff_nav, extract_nav
from snapshots.models import PageSnapshot

# Strictly greater-than: exactly 20.0% is tolerated
CONTENT_CHANGE_THRESHOLD = 20.0

NON_VISIBLE_TAGS = ("script", "style", "noscript", "iframe", "svg")


def visible_text(html: str) -> str:
    """Body text without script/style/noscript/iframe/svg subtrees, whitespace collapsed."""
    soup = BeautifulSoup(html or "", "lxml")
    for tag in soup.find_all(NON_VISIBLE_TAGS):
        tag.decompose()
    body = soup.body
    if body is None:
        return ""
    return " ".join(body.get_text().split())


def percent_difference(old_length: int, new_length: int) -> float:
    """|new - old| / old * 100, or 100 when there was nothing before."""
    if old_length == 0:
        return 100.0
    # Multiply first so integral percentages stay exact (200 of 1000 -> 20.0)
    return abs(new_length - old_length) * 100 / old_length


class VersionComparator:
    """
    Two ordered snapshots of the same URL -> ordered list of Changes.
    Bulk content is compared with a fuzzy length threshold; short high-signal
    fields (title, canonical, first h1) with exact equality.
    Output order: content, title, canonical, h1, nav_removed, nav_added, nav_text_changed.
    """

    def __init__(self, threshold: float = CONTENT_CHANGE_THRESHOLD,
                 nav_locators: Sequence[NavLocator] = DEFAULT_NAV_LOCATORS):
        self._threshold = threshold
        self._nav_locators = nav_locators

    def compare(self, older: PageSnapshot, newer: PageSnapshot) -> List[Change]:
        # INVARIANT: both sides describe the same page
        if older.url != newer.url:
            raise ValueError(f"Identity mismatch: {older.url} vs {newer.url}")

        if is_robots_txt(newer.url):
            change = self._compare_robots(older, newer)
            return [change] if change else []

        changes = []

        content = self._compare_content(older, newer)
        if content:
            changes.append(content)

        for change_type, old_value, new_value in (
            (ChangeType.TITLE, older.title, newer.title),
            (ChangeType.CANONICAL, older.canonical, newer.canonical),
            (ChangeType.H1, older.first_h1, newer.first_h1),
        ):
            if old_value != new_value:
                changes.append(FieldChange(
                    change_type,
                    old_value or EMPTY_PLACEHOLDER,
                    new_value or EMPTY_PLACEHOLDER,
                ))

        old_nav = extract_nav(older.raw_html, older.url, self._nav_locators)
        new_nav = extract_nav(newer.raw_html, newer.url, self._nav_locators)
        changes.extend(diff_nav(old_nav, new_nav))

        return changes

    def _compare_robots(self, older: PageSnapshot, newer: PageSnapshot) -> Optional[RobotsTxtChange]:
        old_content = (older.raw_html or "").strip()
        new_content = (newer.raw_html or "").strip()
        if old_content == new_content:
            return None

        percent = percent_difference(len(old_content), len(new_content))
        # Full bodies are kept; truncation is up to the report
        return RobotsTxtChange(
            ChangeType.ROBOTSTXT,
            percent,
            f"robots.txt content changed ({percent:.1f}% difference)",
            old_content,
            new_content,
        )

    def _compare_content(self, older: PageSnapshot, newer: PageSnapshot) -> Optional[ContentChange]:
        old_length = len(visible_text(older.raw_html))
        new_length = len(visible_text(newer.raw_html))

        # Nothing to measure against
        if old_length == 0:
            return None

        percent = percent_difference(old_length, new_length)
        if percent > self._threshold:
            return ContentChange(
                ChangeType.CONTENT,
                percent,
                f"{percent:.1f}% of visible content difference vs previous version",
            )
        return None


_default = VersionComparator()


def compare(older: PageSnapshot, newer: PageSnapshot) -> List[Change]:
    return _default.compare(older, newer)
