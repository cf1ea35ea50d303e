"""
Renderer abstraction: URL in, fully rendered page text out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class Renderer(ABC):
    """
    Turns a URL into the visible text of the settled page.

    Implementations raise RenderError for navigation or network failures and
    RenderTimeoutError when the hard timeout is exceeded.
    """

    @abstractmethod
    def render(self, url: str, *, timeout_seconds: float, settle_seconds: float = 0.0) -> str:
        """
        Load `url`, wait `settle_seconds` for client-side content and return its text.
        """

    def close(self) -> None:
        """
        Release any resources held by the renderer.
        """

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
