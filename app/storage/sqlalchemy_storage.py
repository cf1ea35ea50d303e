"""
SQLAlchemy-backed job and cache stores.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.domain.race_results import CacheEntry, Job, JobResultRecord, JobStatus
from app.errors import JobNotFoundError
from app.extraction.types import RESULT_FIELDS, ExtractionResult
from app.storage.base import CacheStore, JobStore
from db.models.processing_job import ProcessingJob
from db.models.race_result import RaceResult, RaceResultCacheEntry
from db.repositories.processing_job_repository import ProcessingJobRepository
from db.repositories.race_result_repository import (
    OwnerRepository,
    RaceResultCacheRepository,
    RaceResultRepository,
)

SessionFactory = Callable[[], Session]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; every stored timestamp is UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _result_columns(result: ExtractionResult | None) -> dict[str, object]:
    if result is None:
        return {}
    return {field_name: getattr(result, field_name) for field_name in RESULT_FIELDS}


def _result_from_row(row: RaceResult | RaceResultCacheEntry) -> ExtractionResult:
    values = {field_name: getattr(row, field_name) for field_name in RESULT_FIELDS}
    return ExtractionResult(platform=row.platform, **values)


def _job_from_row(row: ProcessingJob) -> Job:
    return Job(
        job_id=row.job_id,
        owner_id=row.owner_id,
        total_urls=row.total_urls,
        status=row.status,
        processed_urls=row.processed_urls,
        success_count=row.success_count,
        error_count=row.error_count,
        created_at=_as_utc(row.created_at),
        started_at=_as_utc(row.started_at),
        completed_at=_as_utc(row.completed_at),
        error_message=row.error_message,
    )


def _record_from_row(row: RaceResult) -> JobResultRecord:
    has_result = row.status == "completed"
    return JobResultRecord(
        id=row.id,
        job_id=row.job_id,
        owner_id=row.owner_id,
        url=row.url,
        url_hash=row.url_hash,
        status=row.status,
        result=_result_from_row(row) if has_result else None,
        platform=row.platform,
        error_message=row.error_message,
        from_cache=row.from_cache,
        extracted_at=_as_utc(row.extracted_at) or _utcnow(),
    )


class SQLAlchemyCacheStore(CacheStore):
    """
    Cache entries in `race_result_cache`; one short transaction per call.
    """

    def __init__(self, *, session_factory: SessionFactory, ttl: timedelta = timedelta(hours=24)) -> None:
        self._session_factory = session_factory
        self._ttl = ttl

    def lookup(
        self,
        *,
        url_hash: str,
        owner_id: str,
        now: datetime | None = None,
    ) -> ExtractionResult | None:
        with self._session_factory() as db:
            row = RaceResultCacheRepository(db).find_fresh(
                url_hash=url_hash,
                owner_id=owner_id,
                now=now or _utcnow(),
            )
            return _result_from_row(row) if row is not None else None

    def store(
        self,
        *,
        url_hash: str,
        owner_id: str,
        url: str,
        status: str,
        result: ExtractionResult | None = None,
        error_message: str | None = None,
        now: datetime | None = None,
    ) -> CacheEntry:
        cached_at = now or _utcnow()
        expires_at = cached_at + self._ttl
        with self._session_factory() as db, db.begin():
            RaceResultCacheRepository(db).add(
                RaceResultCacheEntry(
                    url_hash=url_hash,
                    owner_id=owner_id,
                    url=url,
                    status=status,
                    platform=result.platform if result is not None else None,
                    error_message=error_message,
                    cached_at=cached_at,
                    expires_at=expires_at,
                    **_result_columns(result),
                )
            )
        return CacheEntry(
            owner_id=owner_id,
            url_hash=url_hash,
            url=url,
            status=status,
            cached_at=cached_at,
            expires_at=expires_at,
            result=result,
            error_message=error_message,
        )


class SQLAlchemyJobStore(JobStore):
    """
    Jobs and per-URL records in `processing_jobs` / `race_results`.
    """

    def __init__(self, *, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._write_lock = threading.Lock()

    def register_owner(self, owner_id: str) -> None:
        with self._session_factory() as db, db.begin():
            OwnerRepository(db).touch(owner_id)

    def create_job(self, *, job_id: str, owner_id: str, total_urls: int) -> Job:
        with self._session_factory() as db, db.begin():
            row = ProcessingJobRepository(db).create_job(
                job_id=job_id,
                owner_id=owner_id,
                total_urls=total_urls,
            )
            return _job_from_row(row)

    def get_job(self, job_id: str) -> Job | None:
        with self._session_factory() as db:
            row = ProcessingJobRepository(db).get_job(job_id)
            return _job_from_row(row) if row is not None else None

    def mark_processing(self, job_id: str) -> Job:
        return self._transition(job_id, JobStatus.PROCESSING)

    def mark_completed(self, job_id: str) -> Job:
        return self._transition(job_id, JobStatus.COMPLETED)

    def mark_failed(self, job_id: str, *, error_message: str) -> Job:
        return self._transition(job_id, JobStatus.FAILED, error_message=error_message)

    def record_result(self, record: JobResultRecord) -> JobResultRecord:
        with self._write_lock, self._session_factory() as db, db.begin():
            row = RaceResultRepository(db).add(
                RaceResult(
                    job_id=record.job_id,
                    owner_id=record.owner_id,
                    url=record.url,
                    url_hash=record.url_hash,
                    status=record.status,
                    platform=record.platform,
                    error_message=record.error_message,
                    from_cache=record.from_cache,
                    extracted_at=record.extracted_at,
                    **_result_columns(record.result),
                )
            )
            if record.job_id is not None:
                ProcessingJobRepository(db).increment_progress(
                    job_id=record.job_id,
                    succeeded=record.succeeded,
                )
            return _record_from_row(row)

    def list_job_results(self, job_id: str) -> list[JobResultRecord]:
        with self._session_factory() as db:
            return [_record_from_row(row) for row in RaceResultRepository(db).list_for_job(job_id)]

    def list_owner_results(self, owner_id: str, *, limit: int = 100) -> list[JobResultRecord]:
        with self._session_factory() as db:
            rows = RaceResultRepository(db).list_for_owner(owner_id, limit=limit)
            return [_record_from_row(row) for row in rows]

    def _transition(self, job_id: str, status: str, *, error_message: str | None = None) -> Job:
        with self._session_factory() as db, db.begin():
            row = ProcessingJobRepository(db).transition(
                job_id=job_id,
                status=status,
                error_message=error_message,
            )
            if row is None:
                raise JobNotFoundError(f"Job not found: {job_id}")
            return _job_from_row(row)
