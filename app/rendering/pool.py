"""
Bounded pool of renderer leases.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from app.extraction.logging_utils import log_event
from app.rendering.base import Renderer

logger = logging.getLogger(__name__)


class RendererPool:
    """
    Hands out at most `size` renderers at a time.

    Each lease creates a renderer from the factory and closes it when the
    lease ends, on success or failure. The lease is used from the thread that
    acquired it.
    """

    def __init__(self, factory: Callable[[], Renderer], *, size: int) -> None:
        if size < 1:
            raise ValueError("Renderer pool size must be at least 1.")
        self._factory = factory
        self._size = size
        self._slots = threading.BoundedSemaphore(size)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        with self._lock:
            return self._peak_in_flight

    @contextmanager
    def lease(self) -> Iterator[Renderer]:
        with self._slots:
            self._track(1)
            try:
                renderer = self._factory()
                try:
                    yield renderer
                finally:
                    self._close_quietly(renderer)
            finally:
                self._track(-1)

    def _track(self, delta: int) -> None:
        with self._lock:
            self._in_flight += delta
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)

    @staticmethod
    def _close_quietly(renderer: Renderer) -> None:
        try:
            renderer.close()
        except Exception as exc:
            log_event(logger, logging.WARNING, "renderer_close_failed", error=str(exc))
