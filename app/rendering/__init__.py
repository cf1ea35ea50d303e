"""
Page rendering collaborators.
"""

from __future__ import annotations

from collections.abc import Callable

from app.config import RaceResultsSettings
from app.rendering.base import Renderer
from app.rendering.pool import RendererPool


def build_renderer_factory(settings: RaceResultsSettings) -> Callable[[], Renderer]:
    """
    Return a zero-argument factory for the configured renderer backend.

    Backends are imported lazily so the static backend does not require a
    Playwright installation.
    """

    if settings.renderer_backend == "http":
        from app.rendering.http_renderer import HTTPRenderer

        return lambda: HTTPRenderer(user_agent=settings.user_agent)

    from app.rendering.playwright_renderer import PlaywrightRenderer

    return lambda: PlaywrightRenderer(user_agent=settings.user_agent)


def build_renderer_pool(settings: RaceResultsSettings) -> RendererPool:
    return RendererPool(build_renderer_factory(settings), size=settings.max_concurrency)


__all__ = ["Renderer", "RendererPool", "build_renderer_factory", "build_renderer_pool"]
