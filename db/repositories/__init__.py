"""
Repository layer exports.
"""

from db.repositories.processing_job_repository import ProcessingJobRepository
from db.repositories.race_result_repository import (
    OwnerRepository,
    RaceResultCacheRepository,
    RaceResultRepository,
)

__all__ = [
    "OwnerRepository",
    "ProcessingJobRepository",
    "RaceResultCacheRepository",
    "RaceResultRepository",
]
