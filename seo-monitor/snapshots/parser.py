"""
Raw HTML -> PageSnapshot.
Missing elements yield defaults; malformed markup never raises.
"""

from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from crawler.logger import setup_logger
from crawler.url_utils import looks_like_url, strip_trailing_slash
from snapshots.models import PageSnapshot

logger = setup_logger("monitor.parse")


def is_canonical_self_ref(canonical: str, url: str) -> bool:
    """
    Exact match after stripping one trailing slash from each side.
    Relative or unparseable canonicals are never self-referencing.
    """
    if not canonical or not url:
        return False
    try:
        c = urlparse(canonical)
        u = urlparse(url)
    except ValueError:
        return False
    if not (c.scheme and c.netloc and u.scheme and u.netloc):
        return False
    return strip_trailing_slash(canonical) == strip_trailing_slash(url)


def parse(html: str, url: str, timestamp: str, status_code: Optional[int] = None) -> PageSnapshot:
    html = html or ""
    soup = BeautifulSoup(html, "lxml")

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    canonical_tag = soup.select_one('link[rel="canonical"]')
    canonical = (canonical_tag.get("href") or "") if canonical_tag else ""

    meta_tag = soup.select_one('meta[name="description"]')
    meta_description = (meta_tag.get("content") or "") if meta_tag else ""

    h1 = tuple(tag.get_text().strip() for tag in soup.find_all("h1"))

    snapshot = PageSnapshot(
        url=url,
        timestamp=timestamp,
        raw_html=html,
        status_code=status_code,
        title=title,
        has_title=bool(title) and not looks_like_url(title),
        canonical=canonical,
        is_canonical_self_ref=is_canonical_self_ref(canonical, url),
        meta_description=meta_description,
        # Presence only; length policy is applied by the report
        has_meta_description=bool(meta_description),
        h1=h1,
        has_h1=len(h1) == 1,
        multiple_h1s=len(h1) > 1,
    )
    logger.debug(f"[PARSE] title={title!r} h1s={len(h1)} canonical={canonical!r}", extra={"context": url})
    return snapshot
