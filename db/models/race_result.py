"""
db/models/race_result.py

Per-URL job result records and append-only extraction cache entries.
Both tables share the normalized participant result columns.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, utcnow


class ResultFieldsMixin:
    """
    Normalized participant result columns; every one is nullable.
    """

    race_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(Text, nullable=True)
    finish_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bib_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rank_overall: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rank_category: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pace: Mapped[str | None] = mapped_column(String(20), nullable=True)
    platform: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, comment="completed, error")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)


class RaceResult(Base, ResultFieldsMixin):
    """
    One processed URL within a job (or a job-less refresh). Written once.
    """

    __tablename__ = "race_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str | None] = mapped_column(
        String(21),
        ForeignKey("processing_jobs.job_id", ondelete="CASCADE"),
        nullable=True,
    )
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    url_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    from_cache: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    extracted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("ix_race_results_job_id", "job_id"),
        Index("ix_race_results_owner_extracted_at", "owner_id", "extracted_at"),
    )


class RaceResultCacheEntry(Base, ResultFieldsMixin):
    """
    Extraction attempt for (url_hash, owner_id). Only unexpired successes are served.
    """

    __tablename__ = "race_result_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_race_result_cache_lookup", "url_hash", "owner_id", "expires_at"),
    )
