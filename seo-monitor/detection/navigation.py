"""
Navigation menu extraction and diffing (homepages only).

Site families render their main menu under different containers, so the
container is looked up in a declarative host-pattern -> selector table.
Adding a site family means adding a NavLocator, not touching the comparator.
"""

from dataclasses import dataclass
from fnmatch import fnmatch
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

import tldextract
from bs4 import BeautifulSoup

from crawler.url_utils import is_root_path
from detection.models import Change, ChangeType, NavChange, NavLink, NavTextChange

# Bundled public suffix snapshot only; no network lookups at runtime
_extract = tldextract.TLDExtract(suffix_list_urls=())


@dataclass(frozen=True)
class NavLocator:
    """
    `host_pattern` is an fnmatch pattern tried against both the full host and
    its registered domain, so 'kidshibbett.com' also covers 'www.kidshibbett.com'.
    """
    host_pattern: str
    selector: str


# First match wins; keep the catch-all last.
DEFAULT_NAV_LOCATORS = (
    # Container id is generated per render, the class is stable
    NavLocator("kidshibbett.com", ".chakra-modal__body"),
    NavLocator("*", "#navigation"),
)


def registered_domain(host: str) -> str:
    ext = _extract(host)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return host


def find_locator(host: str, locators: Sequence[NavLocator] = DEFAULT_NAV_LOCATORS) -> Optional[NavLocator]:
    host = (host or "").lower()
    domain = registered_domain(host)
    for locator in locators:
        pattern = locator.host_pattern.lower()
        if fnmatch(host, pattern) or fnmatch(domain, pattern):
            return locator
    return None


def extract_nav(html: str, page_url: str, locators: Sequence[NavLocator] = DEFAULT_NAV_LOCATORS) -> List[NavLink]:
    """
    Same-origin links inside the page's navigation container.
    Non-root pages always yield []. Duplicate URLs are kept as found.
    """
    try:
        page = urlparse(page_url)
    except ValueError:
        return []
    if not is_root_path(page_url) or not page.hostname:
        return []

    locator = find_locator(page.hostname, locators)
    if locator is None:
        return []

    soup = BeautifulSoup(html or "", "lxml")
    containers = soup.select(locator.selector)
    if not containers:
        return []

    scheme = page.scheme or "https"
    links = []
    # Matches may be nested; each anchor element counts once
    seen = set()
    for container in containers:
        for a in container.select("a[href]"):
            if id(a) in seen:
                continue
            seen.add(id(a))
            href = a.get("href") or ""
            text = " ".join(a.get_text().split())
            if not href or not text:
                continue

            if href.startswith("http://") or href.startswith("https://"):
                full_url = href
            elif href.startswith("/"):
                full_url = f"{scheme}://{page.netloc}{href}"
            else:
                # mailto:, tel:, javascript:, fragment and path-relative hrefs
                continue

            try:
                host = urlparse(full_url).hostname
            except ValueError:
                continue

            # Only track internal links (same host)
            if host == page.hostname:
                links.append(NavLink(url=full_url, text=text))

    return links


def diff_nav(old_links: Sequence[NavLink], new_links: Sequence[NavLink]) -> List[Change]:
    """
    Emits nav_removed, nav_added, nav_text_changed (in that order), each only
    when non-empty. Duplicate URLs collapse with the last text winning.
    """
    old_map: Dict[str, str] = {}
    for link in old_links:
        old_map[link.url] = link.text
    new_map: Dict[str, str] = {}
    for link in new_links:
        new_map[link.url] = link.text

    removed = tuple(NavLink(url, text) for url, text in old_map.items() if url not in new_map)
    added = tuple(NavLink(url, text) for url, text in new_map.items() if url not in old_map)
    text_changed = tuple(
        NavTextChange(url, old_map[url], text)
        for url, text in new_map.items()
        if url in old_map and old_map[url] != text
    )

    changes = []
    if removed:
        changes.append(NavChange(ChangeType.NAV_REMOVED, removed))
    if added:
        changes.append(NavChange(ChangeType.NAV_ADDED, added))
    if text_changed:
        changes.append(NavChange(ChangeType.NAV_TEXT_CHANGED, text_changed))
    return changes
