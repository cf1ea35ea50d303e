"""
Job, result and cache stores.
"""

from app.storage.base import CacheStore, JobStore
from app.storage.memory import InMemoryCacheStore, InMemoryJobStore
from app.storage.sqlalchemy_storage import SQLAlchemyCacheStore, SQLAlchemyJobStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "InMemoryJobStore",
    "JobStore",
    "SQLAlchemyCacheStore",
    "SQLAlchemyJobStore",
]
