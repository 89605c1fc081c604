"""
Adherence Service
Adherence statistics for the signed-in user
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from database import get_db_context
import models
from models import TimingStatus
from tools.identity_provider import IdentityProvider, require_current_user


logger = logging.getLogger(__name__)


@dataclass
class AdherenceSummary:
    """Derived adherence counters; never persisted"""
    total: int = 0
    taken: int = 0
    on_time: int = 0
    late: int = 0
    early: int = 0
    missed: int = 0
    adherence_rate: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "taken": self.taken,
            "on_time": self.on_time,
            "late": self.late,
            "early": self.early,
            "missed": self.missed,
            "adherence_rate": self.adherence_rate
        }


def _status_of(log) -> Optional[TimingStatus]:
    status = getattr(log, "status", None)
    if status is None and isinstance(log, dict):
        status = log.get("status")
    if status is None:
        return None
    try:
        return TimingStatus(status)
    except ValueError:
        return None


def compute_adherence_summary(medications: Iterable, logs: Iterable) -> AdherenceSummary:
    """
    Fold a user's medications and dose logs into an adherence summary.

    taken counts every on-time, late and early log; missed is the
    remainder of the medication count, never below zero; the rate is the
    rounded taken/total percentage capped at 100, 0 when there are no
    medications.
    """
    total = sum(1 for _ in medications)

    counts = {status: 0 for status in TimingStatus}
    for log in logs:
        status = _status_of(log)
        if status is not None:
            counts[status] += 1

    taken = counts[TimingStatus.ON_TIME] + counts[TimingStatus.LATE] + counts[TimingStatus.EARLY]
    rate = min(100, int(math.floor(taken / total * 100 + 0.5))) if total > 0 else 0

    return AdherenceSummary(
        total=total,
        taken=taken,
        on_time=counts[TimingStatus.ON_TIME],
        late=counts[TimingStatus.LATE],
        early=counts[TimingStatus.EARLY],
        missed=max(0, total - taken),
        adherence_rate=rate
    )


class AdherenceService:
    """
    Service for adherence statistics

    The medication and log fetches are gathered as independent coroutines,
    but both use the request's synchronous Session, so the queries still
    run one after the other.
    """

    async def _fetch_medications(self, session: Session, user_id: str) -> List[models.Medication]:
        return session.query(models.Medication).filter(
            models.Medication.user_id == user_id
        ).all()

    async def _fetch_logs(
        self,
        session: Session,
        user_id: str,
        day: Optional[date] = None
    ) -> List[models.DoseLog]:
        query = session.query(models.DoseLog).filter(models.DoseLog.user_id == user_id)

        if day is not None:
            start = datetime.combine(day, time.min)
            query = query.filter(
                models.DoseLog.taken_at >= start,
                models.DoseLog.taken_at < start + timedelta(days=1)
            )

        return query.all()

    async def get_adherence_stats(
        self,
        identity: IdentityProvider,
        day: Optional[date] = None,
        db: Optional[Session] = None
    ) -> AdherenceSummary:
        """
        Adherence summary for the signed-in user

        Args:
            identity: Identity provider for the request
            day: Only count doses taken on this date (all doses when None)
            db: Database session

        Returns:
            Freshly computed AdherenceSummary
        """
        user = await require_current_user(identity)

        async def _get(session: Session) -> AdherenceSummary:
            medications, logs = await asyncio.gather(
                self._fetch_medications(session, user.id),
                self._fetch_logs(session, user.id, day)
            )
            summary = compute_adherence_summary(medications, logs)
            logger.info(
                f"Adherence stats for user {user.id}: "
                f"{summary.adherence_rate}% ({summary.taken}/{summary.total})"
            )
            return summary

        if db:
            return await _get(db)

        with get_db_context() as session:
            return await _get(session)


# Singleton instance
adherence_service = AdherenceService()
