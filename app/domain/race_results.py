"""
app/domain/race_results.py

Domain models for batch race result jobs, per-URL records and cache entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.errors import JobStateError
from app.extraction.types import ExtractionResult


class JobStatus:
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    TERMINAL = frozenset({COMPLETED, FAILED})


class ResultStatus:
    COMPLETED = "completed"
    ERROR = "error"


_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def ensure_transition(current: str, target: str) -> None:
    """
    Raise JobStateError unless `current -> target` moves the job forward.
    """

    if target not in _ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise JobStateError(f"Illegal job status transition {current} -> {target}.")


@dataclass(frozen=True)
class Job:
    """
    One batch submission with aggregate progress counters.
    """

    job_id: str
    owner_id: str
    total_urls: int
    status: str = JobStatus.QUEUED
    processed_urls: int = 0
    success_count: int = 0
    error_count: int = 0
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in JobStatus.TERMINAL


@dataclass(frozen=True)
class JobResultRecord:
    """
    Outcome of one URL: extracted fields on success, an error message otherwise.

    `job_id` is None for records written by a single-URL refresh.
    """

    owner_id: str
    url: str
    status: str
    extracted_at: datetime
    job_id: str | None = None
    url_hash: str | None = None
    result: ExtractionResult | None = None
    platform: str | None = None
    error_message: str | None = None
    from_cache: bool = False
    id: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ResultStatus.COMPLETED

    def fields(self) -> dict[str, Any]:
        """
        Flat field mapping with nulls for a missing result.
        """

        values = (self.result or ExtractionResult()).as_dict()
        values["platform"] = self.platform
        return values


@dataclass(frozen=True)
class CacheEntry:
    """
    Append-only record of one extraction attempt for (owner, url hash).
    """

    owner_id: str
    url_hash: str
    url: str
    status: str
    cached_at: datetime
    expires_at: datetime
    result: ExtractionResult | None = None
    error_message: str | None = None

    def is_servable(self, now: datetime) -> bool:
        return self.status == ResultStatus.COMPLETED and now < self.expires_at
