"""
db/models/processing_job.py

Processing job model for batch race result extraction progress tracking.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.race_results import JobStatus
from db.base import Base, TimestampMixin


class ProcessingJob(Base, TimestampMixin):
    __tablename__ = "processing_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str] = mapped_column(String(21), nullable=False, unique=True)
    owner_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("owners.owner_id", ondelete="CASCADE"),
        nullable=False,
    )
    total_urls: Mapped[int] = mapped_column(Integer, nullable=False)
    processed_urls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    success_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=JobStatus.QUEUED,
        comment="queued, processing, completed, failed",
    )
    error_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Orchestration-level failure only; per-URL errors live on race_results",
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("processed_urls <= total_urls", name="ck_processing_jobs_processed_le_total"),
        CheckConstraint(
            "success_count + error_count = processed_urls",
            name="ck_processing_jobs_counts_sum",
        ),
        Index("ix_processing_jobs_owner_id", "owner_id"),
        Index("ix_processing_jobs_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProcessingJob job_id={self.job_id!r} status={self.status!r} "
            f"processed={self.processed_urls}/{self.total_urls}>"
        )
