"""
Repositories for per-URL race result records, cache entries and owners.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.race_results import ResultStatus
from db.models.owner import Owner
from db.models.race_result import RaceResult, RaceResultCacheEntry


class OwnerRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def touch(self, owner_id: str) -> Owner:
        """
        Return the owner row, creating it on first use and stamping last_seen_at.
        """

        owner = self._session.scalars(select(Owner).where(Owner.owner_id == owner_id)).one_or_none()
        now = datetime.now(timezone.utc)
        if owner is None:
            owner = Owner(owner_id=owner_id, last_seen_at=now)
            self._session.add(owner)
        else:
            owner.last_seen_at = now
        self._session.flush()
        return owner


class RaceResultRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, row: RaceResult) -> RaceResult:
        self._session.add(row)
        self._session.flush()
        return row

    def list_for_job(self, job_id: str) -> list[RaceResult]:
        stmt = select(RaceResult).where(RaceResult.job_id == job_id).order_by(RaceResult.id)
        return list(self._session.scalars(stmt).all())

    def list_for_owner(self, owner_id: str, *, limit: int = 100) -> list[RaceResult]:
        stmt = (
            select(RaceResult)
            .where(RaceResult.owner_id == owner_id)
            .order_by(RaceResult.extracted_at.desc(), RaceResult.id.desc())
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())


class RaceResultCacheRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, row: RaceResultCacheEntry) -> RaceResultCacheEntry:
        self._session.add(row)
        self._session.flush()
        return row

    def find_fresh(
        self,
        *,
        url_hash: str,
        owner_id: str,
        now: datetime,
    ) -> RaceResultCacheEntry | None:
        """
        Newest successful entry for the pair that has not expired at `now`.
        """

        stmt = (
            select(RaceResultCacheEntry)
            .where(
                RaceResultCacheEntry.url_hash == url_hash,
                RaceResultCacheEntry.owner_id == owner_id,
                RaceResultCacheEntry.status == ResultStatus.COMPLETED,
                RaceResultCacheEntry.expires_at > now,
            )
            .order_by(RaceResultCacheEntry.cached_at.desc(), RaceResultCacheEntry.id.desc())
            .limit(1)
        )
        return self._session.scalars(stmt).first()
