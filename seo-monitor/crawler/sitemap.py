"""
Sitemap discovery.
Pulls <loc> entries out of XML sitemaps so they can be monitored alongside
the static URL list.
"""

from typing import Iterable, List

from bs4 import BeautifulSoup

from crawler.fetcher import FetchError
from crawler.logger import setup_logger
from crawler.url_utils import looks_like_url

logger = setup_logger("monitor.sitemap")


def parse_sitemap(xml: str) -> List[str]:
    soup = BeautifulSoup(xml or "", "xml")
    urls = []
    for loc in soup.find_all("loc"):
        url = loc.get_text().strip()
        if url and looks_like_url(url):
            urls.append(url)
    return urls


def fetch_sitemap_urls(sitemap_urls: Iterable[str], backend) -> List[str]:
    """
    Fetch each sitemap (static, no rendering) and collect its URLs.
    A failing sitemap is logged and skipped.
    """
    extracted = []
    for sitemap_url in sitemap_urls:
        logger.info("[SITEMAP] Fetching sitemap", extra={"context": sitemap_url})
        try:
            result = backend.fetch(sitemap_url, render=False)
        except FetchError as e:
            logger.error(f"[SITEMAP] Error fetching sitemap: {e}", extra={"context": sitemap_url})
            continue

        found = parse_sitemap(result.body)
        logger.info(f"[SITEMAP] Found {len(found)} URLs", extra={"context": sitemap_url})
        extracted.extend(found)
    return extracted


def merge_urls(*url_lists: Iterable[str]) -> List[str]:
    """De-duplicate while keeping first-seen order."""
    seen = set()
    merged = []
    for urls in url_lists:
        for url in urls:
            if url not in seen:
                seen.add(url)
                merged.append(url)
    return merged
