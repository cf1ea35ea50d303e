"""
Static renderer for vendors that serve results as server-rendered HTML.
"""

from __future__ import annotations

import requests
from bs4 import BeautifulSoup

from app.errors import PageUnavailableError, RenderError, RenderTimeoutError
from app.rendering.base import Renderer

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


class HTTPRenderer(Renderer):
    """
    Fetch a page with requests and flatten it to visible text with BeautifulSoup.

    No client-side script runs, so `settle_seconds` is ignored.
    """

    def __init__(
        self,
        *,
        user_agent: str,
        session: requests.Session | None = None,
    ) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._headers = {"User-Agent": user_agent}

    def render(self, url: str, *, timeout_seconds: float, settle_seconds: float = 0.0) -> str:
        try:
            response = self._session.get(
                url,
                headers=self._headers,
                timeout=timeout_seconds,
                allow_redirects=True,
            )
        except requests.Timeout as exc:
            raise RenderTimeoutError(f"Timed out fetching {url} after {timeout_seconds}s") from exc
        except requests.RequestException as exc:
            raise RenderError(f"Failed to fetch {url}: {exc}") from exc

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RenderError(f"Retryable status={response.status_code} url={url}")
        if response.status_code >= 400:
            raise PageUnavailableError(f"Status={response.status_code} url={url}")

        return html_to_text(response.text)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


def html_to_text(html: str) -> str:
    """
    Visible text of an HTML document, one block per line.
    """

    soup = BeautifulSoup(html, "html.parser")
    for node in soup(NON_CONTENT_TAGS):
        node.decompose()
    body = soup.body or soup
    return body.get_text("\n", strip=True)
