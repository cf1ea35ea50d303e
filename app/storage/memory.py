"""
Thread-safe in-memory stores for tests and database-less runs.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from app.domain.race_results import (
    CacheEntry,
    Job,
    JobResultRecord,
    JobStatus,
    ensure_transition,
)
from app.errors import JobNotFoundError, JobStateError
from app.extraction.types import ExtractionResult
from app.storage.base import CacheStore, JobStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCacheStore(CacheStore):
    def __init__(self, *, ttl: timedelta = timedelta(hours=24)) -> None:
        self._ttl = ttl
        self._entries: dict[tuple[str, str], list[CacheEntry]] = defaultdict(list)
        self._lock = threading.Lock()

    def lookup(
        self,
        *,
        url_hash: str,
        owner_id: str,
        now: datetime | None = None,
    ) -> ExtractionResult | None:
        moment = now or _utcnow()
        with self._lock:
            entries = list(self._entries.get((owner_id, url_hash), ()))
        for entry in reversed(entries):
            if entry.is_servable(moment):
                return entry.result
        return None

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
        entry = CacheEntry(
            owner_id=owner_id,
            url_hash=url_hash,
            url=url,
            status=status,
            cached_at=cached_at,
            expires_at=cached_at + self._ttl,
            result=result,
            error_message=error_message,
        )
        with self._lock:
            self._entries[(owner_id, url_hash)].append(entry)
        return entry

    def entries(self, *, url_hash: str, owner_id: str) -> list[CacheEntry]:
        with self._lock:
            return list(self._entries.get((owner_id, url_hash), ()))


class InMemoryJobStore(JobStore):
    def __init__(self) -> None:
        self._owners: dict[str, datetime] = {}
        self._jobs: dict[str, Job] = {}
        self._records: list[JobResultRecord] = []
        self._lock = threading.Lock()

    def register_owner(self, owner_id: str) -> None:
        with self._lock:
            self._owners[owner_id] = _utcnow()

    def create_job(self, *, job_id: str, owner_id: str, total_urls: int) -> Job:
        job = Job(job_id=job_id, owner_id=owner_id, total_urls=total_urls, created_at=_utcnow())
        with self._lock:
            if job_id in self._jobs:
                raise JobStateError(f"Job already exists: {job_id}")
            self._jobs[job_id] = job
        return job

    def get_job(self, job_id: str) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id)

    def mark_processing(self, job_id: str) -> Job:
        return self._transition(job_id, JobStatus.PROCESSING, started_at=_utcnow())

    def mark_completed(self, job_id: str) -> Job:
        return self._transition(job_id, JobStatus.COMPLETED, completed_at=_utcnow())

    def mark_failed(self, job_id: str, *, error_message: str) -> Job:
        return self._transition(
            job_id,
            JobStatus.FAILED,
            completed_at=_utcnow(),
            error_message=error_message,
        )

    def record_result(self, record: JobResultRecord) -> JobResultRecord:
        with self._lock:
            if record.job_id is not None:
                job = self._require(record.job_id)
                if job.processed_urls >= job.total_urls:
                    raise JobStateError(f"Job {job.job_id} already has {job.total_urls} results.")
                self._jobs[job.job_id] = replace(
                    job,
                    processed_urls=job.processed_urls + 1,
                    success_count=job.success_count + (1 if record.succeeded else 0),
                    error_count=job.error_count + (0 if record.succeeded else 1),
                )
            stored = replace(record, id=len(self._records) + 1)
            self._records.append(stored)
        return stored

    def list_job_results(self, job_id: str) -> list[JobResultRecord]:
        with self._lock:
            return [record for record in self._records if record.job_id == job_id]

    def list_owner_results(self, owner_id: str, *, limit: int = 100) -> list[JobResultRecord]:
        with self._lock:
            owned = [record for record in self._records if record.owner_id == owner_id]
        owned.sort(key=lambda record: (record.extracted_at, record.id or 0), reverse=True)
        return owned[: max(1, limit)]

    def _transition(self, job_id: str, status: str, **changes: object) -> Job:
        with self._lock:
            job = self._require(job_id)
            ensure_transition(job.status, status)
            updated = replace(job, status=status, **changes)
            self._jobs[job_id] = updated
            return updated

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(f"Job not found: {job_id}")
        return job
