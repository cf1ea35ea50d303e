"""
Orchestrator service for batch race result extraction jobs.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Protocol

from app.config import RaceResultsSettings, get_race_results_settings
from app.domain.race_results import Job, JobResultRecord, ResultStatus
from app.errors import (
    BatchSizeError,
    InvalidURLError,
    JobNotFoundError,
    RaceResultsError,
    UnauthorizedError,
)
from app.extraction.extractor import extract_fields
from app.extraction.logging_utils import log_event
from app.extraction.registry import PlatformRegistry, get_platform_registry
from app.extraction.retry import with_retry
from app.extraction.types import ExtractionResult, PlatformProfile
from app.extraction.urls import SourceURL
from app.rendering.pool import RendererPool
from app.storage.base import CacheStore, JobStore

logger = logging.getLogger(__name__)

JOB_ID_LENGTH = 21
MAX_ERROR_MESSAGE_LENGTH = 2000


class TaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class ThreadPoolTaskExecutor:
    """
    Runs submitted jobs on a small service-owned thread pool.
    """

    def __init__(self, *, max_workers: int = 2) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="race-results-job")

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._pool.submit(task, *args, **kwargs)

    def shutdown(self, *, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)


class InlineTaskExecutor:
    """
    Runs the task immediately in the caller's thread (CLI and tests).
    """

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        task(*args, **kwargs)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_job_id() -> str:
    return secrets.token_urlsafe(16)[:JOB_ID_LENGTH]


def _describe_error(exc: Exception) -> str:
    if isinstance(exc, RaceResultsError):
        message = str(exc) or type(exc).__name__
    else:
        message = f"{type(exc).__name__}: {exc}"
    return message[:MAX_ERROR_MESSAGE_LENGTH]


class RaceResultsService:
    """
    Coordinates job creation, background URL processing, caching and progress.

    Each URL gets exactly one result record: a cache hit, a fresh extraction
    or an error. A failing URL never aborts its batch; only bookkeeping
    failures move a job to `failed`.
    """

    def __init__(
        self,
        *,
        job_store: JobStore,
        cache_store: CacheStore,
        renderer_pool: RendererPool,
        settings: RaceResultsSettings | None = None,
        registry: PlatformRegistry | None = None,
        executor: TaskExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings or get_race_results_settings()
        self._job_store = job_store
        self._cache_store = cache_store
        self._renderer_pool = renderer_pool
        self._registry = registry or get_platform_registry()
        self._owns_executor = executor is None
        self._executor: TaskExecutor = executor or ThreadPoolTaskExecutor()
        self._sleep = sleep
        self._clock = clock

    @property
    def settings(self) -> RaceResultsSettings:
        return self._settings

    def submit_batch(
        self,
        *,
        urls: Sequence[str],
        owner_id: str,
        executor: TaskExecutor | None = None,
    ) -> Job:
        url_list = list(urls)
        if not url_list:
            raise BatchSizeError("At least one URL is required.")
        if len(url_list) > self._settings.max_batch_size:
            raise BatchSizeError(
                f"A batch accepts at most {self._settings.max_batch_size} URLs; got {len(url_list)}."
            )

        self._job_store.register_owner(owner_id)
        job = self._job_store.create_job(
            job_id=_new_job_id(),
            owner_id=owner_id,
            total_urls=len(url_list),
        )
        log_event(
            logger,
            logging.INFO,
            "job_submitted",
            job_id=job.job_id,
            owner_id=owner_id,
            total_urls=job.total_urls,
        )

        try:
            (executor or self._executor).submit(self.process_job, job.job_id, url_list, owner_id)
        except Exception:
            self._job_store.mark_failed(
                job.job_id,
                error_message="Failed to schedule race result job.",
            )
            raise

        return job

    def get_job_status(self, *, job_id: str, owner_id: str) -> Job:
        job = self._job_store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(f"Job not found: {job_id}")
        if job.owner_id != owner_id:
            raise UnauthorizedError(f"Job {job_id} belongs to a different owner.")
        return job

    def get_job_results(self, *, job_id: str, owner_id: str) -> list[JobResultRecord]:
        self.get_job_status(job_id=job_id, owner_id=owner_id)
        return self._job_store.list_job_results(job_id)

    def list_recent_results(self, *, owner_id: str, limit: int | None = None) -> list[JobResultRecord]:
        effective_limit = self._settings.recent_results_limit if limit is None else max(1, limit)
        return self._job_store.list_owner_results(owner_id, limit=effective_limit)

    def refresh_result(self, *, url: str, owner_id: str) -> ExtractionResult:
        """
        Re-extract one URL, bypassing the cache lookup.

        The outcome is cached and recorded without a job; failures are
        re-raised to the caller after being recorded.
        """

        self._job_store.register_owner(owner_id)
        try:
            source = SourceURL.parse(url)
        except InvalidURLError as exc:
            self._record_failure(job_id=None, owner_id=owner_id, url=url, source=None, exc=exc)
            raise

        try:
            profile, result = self._extract(source)
        except Exception as exc:
            self._cache_failure(source, owner_id, exc)
            self._record_failure(job_id=None, owner_id=owner_id, url=url, source=source, exc=exc)
            raise

        self._cache_success(source, owner_id, result)
        self._record_success(job_id=None, owner_id=owner_id, source=source, result=result)
        log_event(
            logger,
            logging.INFO,
            "url_refreshed",
            owner_id=owner_id,
            url=source.normalized,
            platform=profile.name,
        )
        return result

    def process_job(self, job_id: str, urls: Sequence[str], owner_id: str) -> None:
        """
        Run a queued job to completion. Meant to run as a background task.
        """

        started = time.monotonic()
        try:
            self._job_store.mark_processing(job_id)
            log_event(
                logger,
                logging.INFO,
                "job_processing_started",
                job_id=job_id,
                owner_id=owner_id,
                total_urls=len(urls),
            )

            workers = max(1, min(self._settings.max_concurrency, len(urls)))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="race-results-url") as pool:
                futures = [
                    pool.submit(self.process_url, job_id=job_id, url=url, owner_id=owner_id)
                    for url in urls
                ]
                for future in as_completed(futures):
                    future.result()

            job = self._job_store.mark_completed(job_id)
            log_event(
                logger,
                logging.INFO,
                "job_completed",
                job_id=job_id,
                processed_urls=job.processed_urls,
                success_count=job.success_count,
                error_count=job.error_count,
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        except Exception as exc:
            self._mark_job_failed(job_id=job_id, exc=exc)

    def process_url(self, *, job_id: str | None, url: str, owner_id: str) -> JobResultRecord:
        """
        Produce exactly one result record for `url`.

        Extraction failures become error records. Storage errors propagate.
        """

        try:
            source = SourceURL.parse(url)
        except InvalidURLError as exc:
            return self._record_failure(job_id=job_id, owner_id=owner_id, url=url, source=None, exc=exc)

        cached = self._cache_store.lookup(
            url_hash=source.url_hash,
            owner_id=owner_id,
            now=self._clock(),
        )
        if cached is not None:
            log_event(logger, logging.INFO, "url_cache_hit", job_id=job_id, url=source.normalized)
            return self._record_success(
                job_id=job_id,
                owner_id=owner_id,
                source=source,
                result=cached,
                from_cache=True,
            )

        try:
            _, result = self._extract(source)
        except Exception as exc:
            self._cache_failure(source, owner_id, exc)
            return self._record_failure(job_id=job_id, owner_id=owner_id, url=url, source=source, exc=exc)

        self._cache_success(source, owner_id, result)
        return self._record_success(job_id=job_id, owner_id=owner_id, source=source, result=result)

    def shutdown(self) -> None:
        """
        Wait for in-flight jobs when the service owns its executor.
        """

        if self._owns_executor and isinstance(self._executor, ThreadPoolTaskExecutor):
            self._executor.shutdown(wait=True)

    def _extract(self, source: SourceURL) -> tuple[PlatformProfile, ExtractionResult]:
        profile = self._registry.detect(source.normalized)
        settle_seconds = (
            profile.settle_seconds
            if profile.settle_seconds is not None
            else self._settings.settle_seconds
        )

        with self._renderer_pool.lease() as renderer:

            def attempt() -> ExtractionResult:
                text = renderer.render(
                    source.normalized,
                    timeout_seconds=self._settings.render_timeout_seconds,
                    settle_seconds=settle_seconds,
                )
                return extract_fields(text, profile)

            result = with_retry(
                attempt,
                max_attempts=self._settings.max_attempts,
                initial_delay=self._settings.initial_retry_delay_seconds,
                sleep=self._sleep,
                target=source.normalized,
            )
        return profile, result

    def _cache_success(self, source: SourceURL, owner_id: str, result: ExtractionResult) -> None:
        self._cache_store.store(
            url_hash=source.url_hash,
            owner_id=owner_id,
            url=source.normalized,
            status=ResultStatus.COMPLETED,
            result=result,
            now=self._clock(),
        )

    def _cache_failure(self, source: SourceURL, owner_id: str, exc: Exception) -> None:
        self._cache_store.store(
            url_hash=source.url_hash,
            owner_id=owner_id,
            url=source.normalized,
            status=ResultStatus.ERROR,
            error_message=_describe_error(exc),
            now=self._clock(),
        )

    def _record_success(
        self,
        *,
        job_id: str | None,
        owner_id: str,
        source: SourceURL,
        result: ExtractionResult,
        from_cache: bool = False,
    ) -> JobResultRecord:
        record = self._job_store.record_result(
            JobResultRecord(
                job_id=job_id,
                owner_id=owner_id,
                url=source.normalized,
                url_hash=source.url_hash,
                status=ResultStatus.COMPLETED,
                result=result,
                platform=result.platform,
                from_cache=from_cache,
                extracted_at=self._clock(),
            )
        )
        if not from_cache:
            log_event(
                logger,
                logging.INFO,
                "url_extracted",
                job_id=job_id,
                url=source.normalized,
                platform=result.platform,
            )
        return record

    def _record_failure(
        self,
        *,
        job_id: str | None,
        owner_id: str,
        url: str,
        source: SourceURL | None,
        exc: Exception,
    ) -> JobResultRecord:
        error_message = _describe_error(exc)
        profile = self._registry.find(source.normalized) if source is not None else None
        log_event(
            logger,
            logging.WARNING,
            "url_failed",
            job_id=job_id,
            url=source.normalized if source is not None else url,
            error=error_message,
        )
        return self._job_store.record_result(
            JobResultRecord(
                job_id=job_id,
                owner_id=owner_id,
                url=source.normalized if source is not None else url,
                url_hash=source.url_hash if source is not None else None,
                status=ResultStatus.ERROR,
                platform=profile.name if profile is not None else None,
                error_message=error_message,
                extracted_at=self._clock(),
            )
        )

    def _mark_job_failed(self, *, job_id: str, exc: Exception) -> None:
        error_message = _describe_error(exc)
        logger.exception("Race result job failed id=%s error=%s", job_id, error_message)
        log_event(logger, logging.ERROR, "job_failed", job_id=job_id, error=error_message)
        try:
            self._job_store.mark_failed(job_id, error_message=error_message)
        except Exception:
            logger.exception("Failed to persist failed race result job state id=%s", job_id)


def build_race_results_service(
    settings: RaceResultsSettings,
    *,
    executor: TaskExecutor | None = None,
) -> RaceResultsService:
    """
    Wire stores and the renderer pool for the configured backends.
    """

    from app.rendering import build_renderer_pool

    ttl = timedelta(hours=settings.cache_ttl_hours)
    if settings.storage_backend == "memory":
        from app.storage.memory import InMemoryCacheStore, InMemoryJobStore

        job_store: JobStore = InMemoryJobStore()
        cache_store: CacheStore = InMemoryCacheStore(ttl=ttl)
    else:
        from app.storage.sqlalchemy_storage import SQLAlchemyCacheStore, SQLAlchemyJobStore
        from db.session import SessionLocal

        job_store = SQLAlchemyJobStore(session_factory=SessionLocal)
        cache_store = SQLAlchemyCacheStore(session_factory=SessionLocal, ttl=ttl)

    return RaceResultsService(
        job_store=job_store,
        cache_store=cache_store,
        renderer_pool=build_renderer_pool(settings),
        settings=settings,
        executor=executor,
    )


@lru_cache(maxsize=1)
def get_race_results_service() -> RaceResultsService:
    return build_race_results_service(get_race_results_settings())
