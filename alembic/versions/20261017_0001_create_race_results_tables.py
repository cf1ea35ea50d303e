"""create owners, processing_jobs, race_results and race_result_cache tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def _result_columns() -> list[sa.Column]:
    return [
        sa.Column("race_name", sa.Text(), nullable=True),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("finish_time", sa.String(length=20), nullable=True),
        sa.Column("bib_number", sa.String(length=50), nullable=True),
        sa.Column("rank_overall", sa.Integer(), nullable=True),
        sa.Column("rank_category", sa.Integer(), nullable=True),
        sa.Column("pace", sa.String(length=20), nullable=True),
        sa.Column("platform", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, comment="completed, error"),
        sa.Column("error_message", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "owners",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "owner_id",
            sa.String(length=64),
            nullable=False,
            comment="Opaque external identity supplied by the caller",
        ),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id"),
    )

    op.create_table(
        "processing_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.String(length=21), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("total_urls", sa.Integer(), nullable=False),
        sa.Column("processed_urls", sa.Integer(), nullable=False),
        sa.Column("success_count", sa.Integer(), nullable=False),
        sa.Column("error_count", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.String(length=16),
            nullable=False,
            comment="queued, processing, completed, failed",
        ),
        sa.Column(
            "error_message",
            sa.Text(),
            nullable=True,
            comment="Orchestration-level failure only; per-URL errors live on race_results",
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("processed_urls <= total_urls", name="ck_processing_jobs_processed_le_total"),
        sa.CheckConstraint(
            "success_count + error_count = processed_urls",
            name="ck_processing_jobs_counts_sum",
        ),
        sa.ForeignKeyConstraint(["owner_id"], ["owners.owner_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_id"),
    )
    op.create_index("ix_processing_jobs_owner_id", "processing_jobs", ["owner_id"], unique=False)
    op.create_index("ix_processing_jobs_status", "processing_jobs", ["status"], unique=False)

    op.create_table(
        "race_results",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.String(length=21), nullable=True),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("url_hash", sa.String(length=64), nullable=True),
        sa.Column("from_cache", sa.Boolean(), nullable=False),
        sa.Column("extracted_at", sa.DateTime(timezone=True), nullable=False),
        *_result_columns(),
        sa.ForeignKeyConstraint(["job_id"], ["processing_jobs.job_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_race_results_job_id", "race_results", ["job_id"], unique=False)
    op.create_index(
        "ix_race_results_owner_extracted_at",
        "race_results",
        ["owner_id", "extracted_at"],
        unique=False,
    )

    op.create_table(
        "race_result_cache",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("url_hash", sa.String(length=64), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("cached_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_result_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_race_result_cache_lookup",
        "race_result_cache",
        ["url_hash", "owner_id", "expires_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_race_result_cache_lookup", table_name="race_result_cache")
    op.drop_table("race_result_cache")
    op.drop_index("ix_race_results_owner_extracted_at", table_name="race_results")
    op.drop_index("ix_race_results_job_id", table_name="race_results")
    op.drop_table("race_results")
    op.drop_index("ix_processing_jobs_status", table_name="processing_jobs")
    op.drop_index("ix_processing_jobs_owner_id", table_name="processing_jobs")
    op.drop_table("processing_jobs")
    op.drop_table("owners")
