"""
tests/test_renderer_pool.py

Bounded renderer leases and deterministic release.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.errors import RenderError
from app.rendering.pool import RendererPool
from tests.conftest import RenderScript, ScriptedRenderer


class TestRendererPool:
    def test_lease_closes_renderer_on_success(self) -> None:
        script = RenderScript(pages={"https://a.example/": "text"})
        pool = RendererPool(lambda: ScriptedRenderer(script), size=2)

        with pool.lease() as renderer:
            assert renderer.render("https://a.example/", timeout_seconds=30) == "text"
            assert pool.in_flight == 1

        assert script.created == 1
        assert script.closed == 1
        assert pool.in_flight == 0

    def test_lease_closes_renderer_on_failure(self) -> None:
        script = RenderScript()
        pool = RendererPool(lambda: ScriptedRenderer(script), size=1)

        with pytest.raises(RenderError):
            with pool.lease() as renderer:
                renderer.render("https://missing.example/", timeout_seconds=30)

        assert script.closed == 1
        assert pool.in_flight == 0

    def test_concurrent_leases_never_exceed_size(self) -> None:
        script = RenderScript(pages={"https://a.example/": "text"}, delay_seconds=0.02)
        pool = RendererPool(lambda: ScriptedRenderer(script), size=3)

        def use_lease() -> None:
            with pool.lease() as renderer:
                renderer.render("https://a.example/", timeout_seconds=30)

        with ThreadPoolExecutor(max_workers=8) as executor:
            for future in [executor.submit(use_lease) for _ in range(12)]:
                future.result()

        assert pool.peak_in_flight <= 3
        assert script.peak_in_flight <= 3
        assert script.created == script.closed == 12

    def test_waiting_lease_proceeds_after_release(self) -> None:
        script = RenderScript()
        pool = RendererPool(lambda: ScriptedRenderer(script), size=1)
        acquired = threading.Event()

        def second_lease() -> None:
            with pool.lease():
                acquired.set()

        with pool.lease():
            worker = threading.Thread(target=second_lease)
            worker.start()
            time.sleep(0.05)
            assert not acquired.is_set()

        worker.join(timeout=2)
        assert acquired.is_set()

    def test_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            RendererPool(lambda: ScriptedRenderer(RenderScript()), size=0)
