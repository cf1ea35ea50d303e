"""
Repository for processing job lifecycle persistence and atomic progress counters.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.domain.race_results import JobStatus, ensure_transition
from app.errors import JobStateError
from db.models.processing_job import ProcessingJob


class ProcessingJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(
        self,
        *,
        job_id: str,
        owner_id: str,
        total_urls: int,
        created_at: datetime | None = None,
    ) -> ProcessingJob:
        job = ProcessingJob(
            job_id=job_id,
            owner_id=owner_id,
            total_urls=total_urls,
            processed_urls=0,
            success_count=0,
            error_count=0,
            status=JobStatus.QUEUED,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._session.add(job)
        self._session.flush()
        return job

    def get_job(self, job_id: str) -> ProcessingJob | None:
        stmt = select(ProcessingJob).where(ProcessingJob.job_id == job_id)
        return self._session.scalars(stmt).one_or_none()

    def transition(
        self,
        *,
        job_id: str,
        status: str,
        error_message: str | None = None,
    ) -> ProcessingJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        ensure_transition(job.status, status)

        now = datetime.now(timezone.utc)
        job.status = status
        if status == JobStatus.PROCESSING:
            job.started_at = now
        if status in JobStatus.TERMINAL:
            job.completed_at = now
        if status == JobStatus.FAILED:
            job.error_message = error_message
        self._session.flush()
        return job

    def increment_progress(self, *, job_id: str, succeeded: bool) -> None:
        """
        Bump processed and one outcome counter in a single UPDATE statement.
        """

        stmt = (
            update(ProcessingJob)
            .where(
                ProcessingJob.job_id == job_id,
                ProcessingJob.processed_urls < ProcessingJob.total_urls,
            )
            .values(
                processed_urls=ProcessingJob.processed_urls + 1,
                success_count=ProcessingJob.success_count + (1 if succeeded else 0),
                error_count=ProcessingJob.error_count + (0 if succeeded else 1),
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        if result.rowcount != 1:
            raise JobStateError(f"Cannot record progress for job {job_id}: missing or already full.")
