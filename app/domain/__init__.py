"""
app/domain package marker.
"""

from app.domain.race_results import CacheEntry, Job, JobResultRecord, JobStatus, ResultStatus

__all__ = [
    "CacheEntry",
    "Job",
    "JobResultRecord",
    "JobStatus",
    "ResultStatus",
]
