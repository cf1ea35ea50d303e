"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.owner import Owner
from db.models.processing_job import ProcessingJob
from db.models.race_result import RaceResult, RaceResultCacheEntry

__all__ = [
    "Owner",
    "ProcessingJob",
    "RaceResult",
    "RaceResultCacheEntry",
]
