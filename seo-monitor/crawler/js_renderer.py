"""
Synchronous JS rendering backend using Playwright.
Uses a DEDICATED THREAD to own the browser, avoiding greenlet/thread-switching
errors when called from ThreadPoolExecutor workers.
"""

import queue
import threading

from playwright.sync_api import sync_playwright

from crawler.backends import FetchBackend
from crawler.config import JS_GOTO_TIMEOUT, JS_STABILITY_TIME, RENDERING_WAIT_MS, USER_AGENT
from crawler.fetcher import TransportError
from crawler.logger import setup_logger
from crawler.models import FetchResult

logger = setup_logger("monitor.render")


class RenderRequest:
    def __init__(self, url, render, wait_ms):
        self.url = url
        self.render = render
        self.wait_ms = wait_ms
        self.result_queue = queue.Queue()


class RenderResult:
    def __init__(self, content=None, status_code=None, final_url=None, error=None):
        self.content = content
        self.status_code = status_code
        self.final_url = final_url
        self.error = error


class PlaywrightFetchBackend(FetchBackend):
    """
    Headless Chromium behind a request queue.
    Every call blocks until the render thread answers.
    """

    def __init__(self, goto_timeout: int = JS_GOTO_TIMEOUT, stability_time: int = JS_STABILITY_TIME):
        self._goto_timeout = goto_timeout
        self._stability_time = stability_time
        self._requests = queue.Queue()
        self._init_lock = threading.Lock()
        self._thread = None

    def fetch(self, url, render=True, wait_ms=RENDERING_WAIT_MS):
        self._ensure_worker_running()

        req = RenderRequest(url, render, wait_ms)
        self._requests.put(req)

        # BLOCK until result
        result = req.result_queue.get()
        if result.error is not None:
            raise TransportError(f"render failed: {result.error}") from result.error

        return FetchResult(status_code=result.status_code, body=result.content or "",
                           final_url=result.final_url)

    def close(self):
        if self._thread and self._thread.is_alive():
            self._requests.put(None)  # Poison pill
            self._thread.join(timeout=30)

    def _ensure_worker_running(self):
        if self._thread and self._thread.is_alive():
            return

        with self._init_lock:
            if self._thread and self._thread.is_alive():
                return
            self._thread = threading.Thread(target=self._render_loop, daemon=True, name="RenderWorker")
            self._thread.start()

    def _render_loop(self):
        """Runs in the dedicated thread. Owns the Playwright instance."""
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=True,
                    args=["--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage"],
                )
                context = browser.new_context(user_agent=USER_AGENT)
                logger.info("[RENDER] Dedicated render thread started.")

                while True:
                    req = self._requests.get()
                    if req is None:
                        break
                    req.result_queue.put(self._render_one(context, req))

                browser.close()
        except Exception as e:
            logger.critical(f"[RENDER] Fatal thread error: {e}")
            # Unblock anyone still waiting
            while not self._requests.empty():
                req = self._requests.get_nowait()
                if req is not None:
                    req.result_queue.put(RenderResult(error=e))

    def _render_one(self, context, req):
        page = context.new_page()
        try:
            response = page.goto(req.url, wait_until="domcontentloaded",
                                 timeout=self._goto_timeout * 1000)
            if req.render:
                page.wait_for_timeout(max(req.wait_ms, self._stability_time * 1000))
            status_code = response.status if response else None
            return RenderResult(page.content(), status_code, page.url)
        except Exception as e:
            return RenderResult(error=e)
        finally:
            page.close()
