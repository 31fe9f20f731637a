"""
Fetch backends: the services that actually retrieve page bodies.
The resilient fetcher treats them as interchangeable collaborators.
"""

import threading
from abc import ABC, abstractmethod

import requests

from crawler.config import (
    FETCH_BACKEND,
    RENDERING_WAIT_MS,
    REQUEST_TIMEOUT,
    SCRAPFLY_API_KEY,
    SCRAPFLY_ENDPOINT,
    USER_AGENT,
)
from crawler.fetcher import TransportError
from crawler.models import FetchResult


class FetchBackend(ABC):
    """
    Abstraction for the underlying HTTP / render service.
    Contractual Requirements for Implementers:
    - MUST return the target's status code (None if unknown) and body text.
    - MUST raise TransportError when no response could be obtained.
    - MUST NOT retry; retry policy belongs to ResilientFetcher.
    """

    @abstractmethod
    def fetch(self, url: str, render: bool = True, wait_ms: int = RENDERING_WAIT_MS) -> FetchResult:
        pass

    def close(self) -> None:
        pass


class RequestsFetchBackend(FetchBackend):
    """Plain HTTP GET. JavaScript is never executed, `render` is ignored."""

    def __init__(self, session=None, timeout: int = REQUEST_TIMEOUT):
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        self._timeout = timeout

    def fetch(self, url, render=True, wait_ms=RENDERING_WAIT_MS):
        try:
            r = self._session.get(url, timeout=self._timeout, allow_redirects=True)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"timeout: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"connection_error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"request_error: {e}") from e
        return FetchResult(status_code=r.status_code, body=r.text, final_url=r.url)

    def close(self):
        self._session.close()


class ScrapflyFetchBackend(FetchBackend):
    """
    Scrapfly scrape API (anti-bot bypass + optional JS rendering).
    The API answers 200 with the target's own status in result.status_code.
    """

    def __init__(self, api_key: str = SCRAPFLY_API_KEY, endpoint: str = SCRAPFLY_ENDPOINT,
                 session=None, timeout: int = REQUEST_TIMEOUT):
        if not api_key:
            raise ValueError("SCRAPFLY_API_KEY is not configured")
        self._api_key = api_key
        self._endpoint = endpoint.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch(self, url, render=True, wait_ms=RENDERING_WAIT_MS):
        params = {
            "key": self._api_key,
            "url": url,
            "asp": "true",
            "render_js": "true" if render else "false",
        }
        if render:
            params["rendering_wait"] = int(wait_ms)

        try:
            r = self._session.get(f"{self._endpoint}/scrape", params=params, timeout=self._timeout)
            r.raise_for_status()
            payload = r.json()
        except requests.exceptions.RequestException as e:
            raise TransportError(f"scrapfly request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"scrapfly returned malformed JSON: {e}") from e

        result = payload.get("result") or {}
        return FetchResult(
            status_code=result.get("status_code"),
            body=result.get("content") or "",
            final_url=result.get("url"),
        )

    def close(self):
        self._session.close()


class ThrottledFetchBackend(FetchBackend):
    """
    Shared concurrency cap in front of another backend.
    All workers funnel through one semaphore so the fetch service sees at most
    `max_concurrent` in-flight requests.
    """

    def __init__(self, inner: FetchBackend, max_concurrent: int):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._inner = inner
        self._semaphore = threading.BoundedSemaphore(max_concurrent)

    def fetch(self, url, render=True, wait_ms=RENDERING_WAIT_MS):
        with self._semaphore:
            return self._inner.fetch(url, render=render, wait_ms=wait_ms)

    def close(self):
        self._inner.close()


def build_backend(name: str = FETCH_BACKEND) -> FetchBackend:
    """Factory used by the CLI. Playwright is imported lazily."""
    name = (name or "").lower()
    if name == "scrapfly":
        return ScrapflyFetchBackend()
    if name == "requests":
        return RequestsFetchBackend()
    if name == "playwright":
        from crawler.js_renderer import PlaywrightFetchBackend
        return PlaywrightFetchBackend()
    raise ValueError(f"Unknown fetch backend: {name!r}")
