"""
Resilient fetching for monitored pages.
Wraps a fetch backend in a fixed-delay retry loop gated by the content validator.

Attempt lifecycle:
    Attempting -> Succeeded
    Attempting -> Retrying -> Attempting ...   (403, invalid content, transport error)
    Attempting -> Failed                       (attempts exhausted)
"""

import time
from typing import Callable, Optional

from crawler.config import MAX_ATTEMPTS, RETRY_DELAY_MS, RENDER_JS, RENDERING_WAIT_MS
from crawler.logger import setup_logger
from crawler.models import FetchResult, ValidationResult
from crawler.validator import validate

logger = setup_logger("monitor.fetch")


class FetchError(Exception):
    """Base fetch exception."""
    pass


class TransportError(FetchError):
    """Raised when the backend could not produce a response at all."""
    pass


class ForbiddenError(FetchError):
    """Raised on an HTTP 403 from the target."""

    def __init__(self, url: str):
        super().__init__("403 Forbidden")
        self.url = url


class InvalidContentError(FetchError):
    """Raised when the validator rejects the fetched body."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid content: {reason}")
        self.reason = reason


class ExhaustedRetriesError(FetchError):
    """
    Terminal failure: every attempt failed.
    Only this kind leaves the fetcher; `last_error` holds the final cause.
    """

    def __init__(self, url: str, attempts: int, last_error: Optional[Exception]):
        detail = str(last_error) if last_error else "unknown error"
        super().__init__(f"Failed after {attempts} attempt(s): {detail}")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class ResilientFetcher:
    """
    Retry loop around a FetchBackend.
    The inter-attempt delay is fixed: no exponential growth, no jitter.
    """

    def __init__(
        self,
        backend,
        max_attempts: int = MAX_ATTEMPTS,
        delay_ms: int = RETRY_DELAY_MS,
        render: bool = RENDER_JS,
        wait_ms: int = RENDERING_WAIT_MS,
        validator: Callable[[str, str], ValidationResult] = validate,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._backend = backend
        self.max_attempts = max_attempts
        self.delay_ms = delay_ms
        self.render = render
        self.wait_ms = wait_ms
        self._validator = validator
        self._sleep = sleep

    def fetch(self, url: str) -> FetchResult:
        """
        Returns the first validated FetchResult.
        Raises ExhaustedRetriesError after max_attempts failed attempts.
        """
        last_error = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = self._attempt(url)
            except FetchError as e:
                last_error = e
                logger.warning(
                    f"[FETCH] Attempt {attempt}/{self.max_attempts}: {e}",
                    extra={"context": url},
                )
                if attempt < self.max_attempts:
                    self._sleep(self.delay_ms / 1000.0)
                continue

            logger.info(
                f"[FETCH] Success ({len(result.body)} characters, status: {result.status_code})",
                extra={"context": url},
            )
            # Snapshots stay keyed by the requested URL
            if result.final_url and result.final_url != url:
                logger.warning(f"[FETCH] Redirected to {result.final_url}", extra={"context": url})
            return result

        logger.error(
            f"[FETCH] Giving up after {self.max_attempts} attempt(s): {last_error}",
            extra={"context": url},
        )
        raise ExhaustedRetriesError(url, self.max_attempts, last_error) from last_error

    def _attempt(self, url: str) -> FetchResult:
        try:
            result = self._backend.fetch(url, render=self.render, wait_ms=self.wait_ms)
        except FetchError:
            raise
        except Exception as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        if result.status_code == 403:
            raise ForbiddenError(url)

        verdict = self._validator(result.body or "", url)
        if not verdict.valid:
            raise InvalidContentError(verdict.reason)

        return result
