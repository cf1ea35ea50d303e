"""
tests/test_cache_store.py

Per-owner TTL cache semantics, shared by the in-memory and SQLAlchemy stores.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers tables on Base.metadata
from app.domain.race_results import ResultStatus
from app.extraction.types import ExtractionResult
from app.storage.base import CacheStore
from app.storage.memory import InMemoryCacheStore
from app.storage.sqlalchemy_storage import SQLAlchemyCacheStore
from db.base import Base
from db.session import create_session_factory

T0 = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)
TTL = timedelta(hours=24)
URL = "https://sportstimingsolutions.in/results?q=abc"
URL_HASH = "a" * 64
RESULT = ExtractionResult(name="Rahul Sharma", finish_time="03:45:12", rank_overall=512, platform="Sports Timing Solutions")


@pytest.fixture(params=["memory", "sqlalchemy"])
def cache_store(request: pytest.FixtureRequest) -> Iterator[CacheStore]:
    if request.param == "memory":
        yield InMemoryCacheStore(ttl=TTL)
        return

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield SQLAlchemyCacheStore(session_factory=create_session_factory(engine), ttl=TTL)
    finally:
        engine.dispose()


def _store_success(store: CacheStore, *, owner_id: str = "owner-a", at: datetime = T0, result: ExtractionResult = RESULT):
    return store.store(
        url_hash=URL_HASH,
        owner_id=owner_id,
        url=URL,
        status=ResultStatus.COMPLETED,
        result=result,
        now=at,
    )


class TestCacheTTL:
    def test_entry_expires_one_ttl_after_caching(self, cache_store: CacheStore) -> None:
        entry = _store_success(cache_store)
        assert entry.expires_at == T0 + TTL

    def test_hit_one_second_before_expiry(self, cache_store: CacheStore) -> None:
        _store_success(cache_store)
        hit = cache_store.lookup(url_hash=URL_HASH, owner_id="owner-a", now=T0 + TTL - timedelta(seconds=1))
        assert hit == RESULT

    def test_miss_one_second_after_expiry(self, cache_store: CacheStore) -> None:
        _store_success(cache_store)
        assert cache_store.lookup(url_hash=URL_HASH, owner_id="owner-a", now=T0 + TTL + timedelta(seconds=1)) is None

    def test_miss_exactly_at_expiry(self, cache_store: CacheStore) -> None:
        _store_success(cache_store)
        assert cache_store.lookup(url_hash=URL_HASH, owner_id="owner-a", now=T0 + TTL) is None


class TestCacheScope:
    def test_entries_are_scoped_per_owner(self, cache_store: CacheStore) -> None:
        _store_success(cache_store, owner_id="owner-a")
        assert cache_store.lookup(url_hash=URL_HASH, owner_id="owner-b", now=T0) is None

    def test_error_entries_are_never_served(self, cache_store: CacheStore) -> None:
        cache_store.store(
            url_hash=URL_HASH,
            owner_id="owner-a",
            url=URL,
            status=ResultStatus.ERROR,
            error_message="RenderError: boom",
            now=T0,
        )
        assert cache_store.lookup(url_hash=URL_HASH, owner_id="owner-a", now=T0) is None

    def test_newest_success_wins(self, cache_store: CacheStore) -> None:
        newer = ExtractionResult(name="Rahul Sharma", finish_time="03:40:00", platform="Sports Timing Solutions")
        _store_success(cache_store, at=T0)
        _store_success(cache_store, at=T0 + timedelta(hours=1), result=newer)

        assert cache_store.lookup(url_hash=URL_HASH, owner_id="owner-a", now=T0 + timedelta(hours=2)) == newer

    def test_later_error_does_not_hide_fresh_success(self, cache_store: CacheStore) -> None:
        _store_success(cache_store, at=T0)
        cache_store.store(
            url_hash=URL_HASH,
            owner_id="owner-a",
            url=URL,
            status=ResultStatus.ERROR,
            error_message="RenderError: boom",
            now=T0 + timedelta(minutes=5),
        )
        assert cache_store.lookup(url_hash=URL_HASH, owner_id="owner-a", now=T0 + timedelta(minutes=10)) == RESULT
