"""
Shared fixtures: scripted renderers, a controllable clock and service wiring.

Nothing here touches the network or a real browser.
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from app.config import RaceResultsSettings
from app.errors import RenderError
from app.rendering.base import Renderer
from app.rendering.pool import RendererPool
from app.services.race_results_service import InlineTaskExecutor, RaceResultsService
from app.storage.memory import InMemoryCacheStore, InMemoryJobStore

STS_URL = "https://sportstimingsolutions.in/results?q=abc&bib=40213"
MYSAMAY_URL = "https://www.mysamay.in/race/results/9876"
IFINISH_URL = "https://results.ifinish.in/event/2026/runner/1204"

STS_PAGE_TEXT = """Tata Mumbai Marathon 2026
Share
RS
Rahul Sharma
BIB No: 40213
Finish Time: 03:45:12
Chip Pace (min/km): 00:05:20
Rank
Overall
512 OF 8000
Gender
450 OF 6000
40 yrs & Above Male
37 OF 900
"""

MYSAMAY_PAGE_TEXT = """Event Name: Pune Half Marathon 2026
Participant Name: Ananya Iyer
Bib No: H-2231
Category: Half Marathon Female 30-39
Chip Time: 01:52:40
Gun Time: 01:54:05
Overall Rank: 1,204
Category Rank: 87
Pace: 05:20
"""

IFINISH_PAGE_TEXT = """Event: Bengaluru 10K Challenge
Runner: Vikram Rao
BIB No: 10K-5521
Race Category: 10K Open Male
Net Time: 00:48:31
Gun Time: 00:49:02
Overall Position: 342
AG Position: 41
Pace: 04:51
"""


class FrozenClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass
class RenderScript:
    """
    Canned page text per URL plus queued failures raised before a URL succeeds.
    """

    pages: dict[str, str] = field(default_factory=dict)
    failures: dict[str, list[Exception]] = field(default_factory=dict)
    delay_seconds: float = 0.0
    calls: Counter = field(default_factory=Counter)
    settle_seen: list[float] = field(default_factory=list)
    created: int = 0
    closed: int = 0
    in_flight: int = 0
    peak_in_flight: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def render(self, url: str, *, timeout_seconds: float, settle_seconds: float) -> str:
        with self._lock:
            self.calls[url] += 1
            self.settle_seen.append(settle_seconds)
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay_seconds:
                time.sleep(self.delay_seconds)
            with self._lock:
                pending = self.failures.get(url)
                failure = pending.pop(0) if pending else None
            if failure is not None:
                raise failure
            if url not in self.pages:
                raise RenderError(f"No page scripted for {url}")
            return self.pages[url]
        finally:
            with self._lock:
                self.in_flight -= 1

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


class ScriptedRenderer(Renderer):
    def __init__(self, script: RenderScript) -> None:
        self._script = script
        with script._lock:
            script.created += 1

    def render(self, url: str, *, timeout_seconds: float, settle_seconds: float = 0.0) -> str:
        return self._script.render(url, timeout_seconds=timeout_seconds, settle_seconds=settle_seconds)

    def close(self) -> None:
        with self._script._lock:
            self._script.closed += 1


@dataclass
class ServiceHarness:
    service: RaceResultsService
    job_store: InMemoryJobStore
    cache_store: InMemoryCacheStore
    pool: RendererPool
    script: RenderScript
    clock: FrozenClock
    sleeps: list[float]


def build_harness(
    script: RenderScript | None = None,
    *,
    settings: RaceResultsSettings | None = None,
    clock: FrozenClock | None = None,
) -> ServiceHarness:
    script = script or RenderScript()
    settings = settings or RaceResultsSettings(settle_seconds=0.0, renderer_backend="http", storage_backend="memory")
    clock = clock or FrozenClock()
    sleeps: list[float] = []
    job_store = InMemoryJobStore()
    cache_store = InMemoryCacheStore(ttl=timedelta(hours=settings.cache_ttl_hours))
    pool = RendererPool(lambda: ScriptedRenderer(script), size=settings.max_concurrency)
    service = RaceResultsService(
        job_store=job_store,
        cache_store=cache_store,
        renderer_pool=pool,
        settings=settings,
        executor=InlineTaskExecutor(),
        sleep=sleeps.append,
        clock=clock,
    )
    return ServiceHarness(
        service=service,
        job_store=job_store,
        cache_store=cache_store,
        pool=pool,
        script=script,
        clock=clock,
        sleeps=sleeps,
    )


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def script() -> RenderScript:
    return RenderScript(
        pages={
            STS_URL: STS_PAGE_TEXT,
            MYSAMAY_URL: MYSAMAY_PAGE_TEXT,
            IFINISH_URL: IFINISH_PAGE_TEXT,
        }
    )


@pytest.fixture()
def harness(script: RenderScript, clock: FrozenClock) -> ServiceHarness:
    return build_harness(script, clock=clock)
