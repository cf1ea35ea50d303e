"""
Storage interfaces for jobs, per-URL results and the extraction cache.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from app.domain.race_results import CacheEntry, Job, JobResultRecord
from app.extraction.types import ExtractionResult


class CacheStore(ABC):
    """
    Per-owner extraction cache. Writes are append-only.
    """

    @abstractmethod
    def lookup(
        self,
        *,
        url_hash: str,
        owner_id: str,
        now: datetime | None = None,
    ) -> ExtractionResult | None:
        """
        Return the freshest successful, unexpired result for (url_hash, owner_id).
        """

    @abstractmethod
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
        """
        Insert a new entry expiring one TTL after `now`.
        """


class JobStore(ABC):
    """
    Job records, their atomic progress counters and per-URL result records.
    """

    @abstractmethod
    def register_owner(self, owner_id: str) -> None:
        """
        Record that `owner_id` has been seen.
        """

    @abstractmethod
    def create_job(self, *, job_id: str, owner_id: str, total_urls: int) -> Job:
        """
        Persist a new `queued` job.
        """

    @abstractmethod
    def get_job(self, job_id: str) -> Job | None:
        """
        Return the job, or None when it does not exist.
        """

    @abstractmethod
    def mark_processing(self, job_id: str) -> Job:
        """
        Move a queued job to `processing` and stamp started_at.
        """

    @abstractmethod
    def mark_completed(self, job_id: str) -> Job:
        """
        Move a processing job to `completed` and stamp completed_at.
        """

    @abstractmethod
    def mark_failed(self, job_id: str, *, error_message: str) -> Job:
        """
        Move a non-terminal job to `failed`.
        """

    @abstractmethod
    def record_result(self, record: JobResultRecord) -> JobResultRecord:
        """
        Insert the record and, when it belongs to a job, bump the job's counters.

        Both happen atomically so readers never see a record without its count.
        """

    @abstractmethod
    def list_job_results(self, job_id: str) -> list[JobResultRecord]:
        """
        Records of one job in insertion order.
        """

    @abstractmethod
    def list_owner_results(self, owner_id: str, *, limit: int = 100) -> list[JobResultRecord]:
        """
        The owner's newest records across jobs.
        """
