"""
tests/test_playwright_renderer.py

Failure mapping of the headless renderer with the browser replaced by mocks.
"""

from __future__ import annotations

from unittest import mock

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from app.errors import RenderError, RenderTimeoutError
from app.rendering.playwright_renderer import PlaywrightRenderer

URL = "https://www.mysamay.in/race/results/9876"


def _renderer_with(browser: mock.Mock) -> PlaywrightRenderer:
    renderer = PlaywrightRenderer(user_agent="test-agent")
    renderer._ensure_browser = mock.Mock(return_value=browser)  # type: ignore[method-assign]
    return renderer


class TestPlaywrightRenderer:
    def test_returns_body_text_and_closes_page(self) -> None:
        page = mock.Mock()
        page.inner_text.return_value = "Participant Name: Ananya Iyer"
        browser = mock.Mock()
        browser.new_page.return_value = page

        text = _renderer_with(browser).render(URL, timeout_seconds=30, settle_seconds=1.5)

        assert text == "Participant Name: Ananya Iyer"
        page.goto.assert_called_once_with(URL, wait_until="networkidle", timeout=30000)
        page.wait_for_timeout.assert_called_once_with(1500.0)
        page.close.assert_called_once()

    def test_page_creation_failure_is_render_error(self) -> None:
        browser = mock.Mock()
        browser.new_page.side_effect = PlaywrightError("Target page, context or browser has been closed")

        with pytest.raises(RenderError) as exc_info:
            _renderer_with(browser).render(URL, timeout_seconds=30)

        assert not isinstance(exc_info.value, RenderTimeoutError)
        assert URL in str(exc_info.value)

    def test_navigation_timeout_is_render_timeout(self) -> None:
        page = mock.Mock()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded.")
        browser = mock.Mock()
        browser.new_page.return_value = page

        with pytest.raises(RenderTimeoutError):
            _renderer_with(browser).render(URL, timeout_seconds=30)

        page.close.assert_called_once()
