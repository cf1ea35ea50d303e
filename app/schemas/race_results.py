"""
Schemas for race result job, result and refresh endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.race_results import Job, JobResultRecord
from app.extraction.types import ExtractionResult


class SubmitBatchRequest(BaseModel):
    urls: list[str] = Field(default_factory=list)


class RefreshRequest(BaseModel):
    url: str = Field(min_length=1)


class JobAcceptedResponse(BaseModel):
    job_id: str
    status: str
    total_urls: int
    created_at: datetime | None = None


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    total_urls: int
    processed_urls: int
    success_count: int
    error_count: int
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None

    @classmethod
    def from_job(cls, job: Job) -> JobStatusResponse:
        return cls(
            job_id=job.job_id,
            status=job.status,
            total_urls=job.total_urls,
            processed_urls=job.processed_urls,
            success_count=job.success_count,
            error_count=job.error_count,
            created_at=job.created_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
            error_message=job.error_message,
        )


class ExtractionResultResponse(BaseModel):
    race_name: str | None = None
    name: str | None = None
    category: str | None = None
    finish_time: str | None = None
    bib_number: str | None = None
    rank_overall: int | None = None
    rank_category: int | None = None
    pace: str | None = None
    platform: str | None = None

    @classmethod
    def from_result(cls, result: ExtractionResult) -> ExtractionResultResponse:
        return cls(**result.as_dict())


class JobResultResponse(ExtractionResultResponse):
    job_id: str | None = None
    url: str
    status: str
    error_message: str | None = None
    from_cache: bool = False
    extracted_at: datetime

    @classmethod
    def from_record(cls, record: JobResultRecord) -> JobResultResponse:
        return cls(
            job_id=record.job_id,
            url=record.url,
            status=record.status,
            error_message=record.error_message,
            from_cache=record.from_cache,
            extracted_at=record.extracted_at,
            **record.fields(),
        )


class JobResultListResponse(BaseModel):
    results: list[JobResultResponse] = Field(default_factory=list)
