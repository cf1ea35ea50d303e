"""
Headless Chromium renderer built on Playwright's sync API.
"""

from __future__ import annotations

import logging

from playwright.sync_api import Browser, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from app.errors import RenderError, RenderTimeoutError
from app.extraction.logging_utils import log_event
from app.rendering.base import Renderer

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class PlaywrightRenderer(Renderer):
    """
    Owns one browser for its lifetime; each render opens and closes a page.

    Playwright's sync objects are bound to the thread that created them, so
    an instance must be used and closed on a single thread. RendererPool
    guarantees this by scoping each instance to one lease.
    """

    def __init__(self, *, user_agent: str | None = None, headless: bool = True) -> None:
        self._user_agent = user_agent
        self._headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    def render(self, url: str, *, timeout_seconds: float, settle_seconds: float = 0.0) -> str:
        browser = self._ensure_browser()
        page = None
        try:
            page = browser.new_page(user_agent=self._user_agent)
            page.goto(url, wait_until="networkidle", timeout=timeout_seconds * 1000)
            if settle_seconds > 0:
                page.wait_for_timeout(settle_seconds * 1000)
            return page.inner_text("body")
        except PlaywrightTimeoutError as exc:
            raise RenderTimeoutError(f"Timed out rendering {url} after {timeout_seconds}s") from exc
        except PlaywrightError as exc:
            raise RenderError(f"Failed to render {url}: {exc}") from exc
        finally:
            if page is not None:
                page.close()

    def close(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        try:
            if browser is not None and browser.is_connected():
                browser.close()
        except PlaywrightError as exc:
            log_event(logger, logging.WARNING, "browser_close_failed", error=str(exc))
        finally:
            if playwright is not None:
                playwright.stop()

    def _ensure_browser(self) -> Browser:
        if self._browser is not None and self._browser.is_connected():
            return self._browser
        try:
            if self._playwright is None:
                self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self._headless,
                args=LAUNCH_ARGS,
            )
        except PlaywrightError as exc:
            raise RenderError(f"Failed to launch browser: {exc}") from exc
        log_event(logger, logging.DEBUG, "browser_launched", headless=self._headless)
        return self._browser
