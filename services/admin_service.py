"""
Admin Service
Cross-patient adherence views for administrators
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from config import settings
from database import get_db_context
import models
from services.adherence_service import AdherenceSummary, compute_adherence_summary
from tools.identity_provider import Identity, IdentityProvider
from tools.name_resolver import NameResolver, ResolvedName, name_resolver, placeholder_identity


logger = logging.getLogger(__name__)


@dataclass
class PatientAggregate:
    """One patient's medications, dose logs and adherence summary"""
    user_id: str
    name: ResolvedName
    medications: List[Any] = field(default_factory=list)
    logs: List[Any] = field(default_factory=list)
    summary: AdherenceSummary = field(default_factory=AdherenceSummary)

    def stats_row(self) -> Dict[str, Any]:
        """Flat identity + summary row"""
        return {
            "id": self.user_id,
            **self.name.to_dict(),
            **self.summary.to_dict()
        }


def owner_ids(medications: Iterable, logs: Iterable) -> List[str]:
    """Distinct owner ids in encounter order, medications first"""
    seen: Dict[str, None] = {}
    for record in list(medications) + list(logs):
        seen.setdefault(record.user_id, None)
    return list(seen)


def consolidate_patient_data(
    medications: Sequence,
    logs: Sequence,
    identities: Optional[Dict[str, Identity]] = None,
    include_log_only_owners: bool = True,
    resolver: NameResolver = name_resolver,
    extra_owner_ids: Sequence[str] = ()
) -> List[PatientAggregate]:
    """
    Merge every patient's medications and logs into aggregates.

    Owners are seeded from medications and, unless include_log_only_owners
    is off, from logs too; with it off, logs of owners without medications
    are dropped. extra_owner_ids adds accounts without any records, after
    the owners seen in the data. Result is sorted by medication count,
    descending, keeping encounter order for equal counts.
    """
    identities = identities or {}
    patients: Dict[str, PatientAggregate] = {}

    def _accumulator(user_id: str) -> PatientAggregate:
        if user_id not in patients:
            identity = identities.get(user_id) or placeholder_identity(user_id)
            patients[user_id] = PatientAggregate(
                user_id=user_id,
                name=resolver.resolve(identity)
            )
        return patients[user_id]

    for medication in medications:
        _accumulator(medication.user_id).medications.append(medication)

    dropped = 0
    for log in logs:
        if log.user_id in patients or include_log_only_owners:
            _accumulator(log.user_id).logs.append(log)
        else:
            dropped += 1

    if dropped:
        logger.warning(f"Dropped {dropped} dose logs of patients without medications")

    for user_id in extra_owner_ids:
        _accumulator(user_id)

    for patient in patients.values():
        patient.summary = compute_adherence_summary(patient.medications, patient.logs)

    # sorted() is stable
    return sorted(patients.values(), key=lambda p: p.summary.total, reverse=True)


class AdminService:
    """
    Service for administrator views across all patients

    Reads are unscoped. Identity lookups degrade to placeholder identities
    so one missing account never hides the rest of the data.
    """

    def __init__(self, resolver: NameResolver = name_resolver):
        self.resolver = resolver

    async def _fetch_all_medications(self, session: Session) -> List[models.Medication]:
        return session.query(models.Medication).order_by(
            models.Medication.created_at.desc(),
            models.Medication.id.desc()
        ).all()

    async def _fetch_all_logs(self, session: Session) -> List[models.DoseLog]:
        return session.query(models.DoseLog).order_by(
            models.DoseLog.taken_at.desc(),
            models.DoseLog.id.desc()
        ).all()

    async def _fetch_all(self, session: Session):
        # Gathered for independence only; the shared Session runs the two
        # queries sequentially
        medications, logs = await asyncio.gather(
            self._fetch_all_medications(session),
            self._fetch_all_logs(session)
        )
        logger.info(f"Found {len(medications)} medications and {len(logs)} logs")
        return medications, logs

    async def resolve_identities(
        self,
        identity: IdentityProvider,
        user_ids: Sequence[str],
        include_all_accounts: bool = False
    ) -> Dict[str, Identity]:
        """
        Look up identities for the given users.

        Tries the bulk listing first; when that fails each user is looked
        up on its own, one at a time, with a placeholder for any failure.
        With include_all_accounts, every listed account is returned as well
        when the bulk listing succeeds.
        """
        try:
            users = await identity.list_all_users()
        except Exception as e:
            logger.warning(f"Listing users failed ({e}); looking up users one by one")
        else:
            by_id = {u.id: u for u in users}
            logger.info(f"Found {len(by_id)} users")
            resolved = {
                user_id: by_id.get(user_id) or placeholder_identity(user_id)
                for user_id in user_ids
            }
            if include_all_accounts:
                for user_id, user in by_id.items():
                    resolved.setdefault(user_id, user)
            return resolved

        resolved: Dict[str, Identity] = {}
        for user_id in user_ids:
            try:
                resolved[user_id] = await identity.get_user_by_id(user_id)
            except Exception as e:
                logger.warning(f"Could not get user {user_id[:8]} ({e}), using placeholder")
                resolved[user_id] = placeholder_identity(user_id)
        return resolved

    async def get_patient_aggregates(
        self,
        identity: IdentityProvider,
        include_log_only_owners: Optional[bool] = None,
        include_all_accounts: bool = False,
        db: Optional[Session] = None
    ) -> List[PatientAggregate]:
        """
        Consolidated per-patient data, largest medication lists first

        Args:
            identity: Identity provider with admin access
            include_log_only_owners: Surface patients that only have logs
                (defaults to settings.ADMIN_INCLUDE_LOG_ONLY_OWNERS)
            include_all_accounts: Also list accounts without medications or
                logs, when the provider can list accounts
            db: Database session
        """
        if include_log_only_owners is None:
            include_log_only_owners = settings.ADMIN_INCLUDE_LOG_ONLY_OWNERS

        async def _get(session: Session) -> List[PatientAggregate]:
            medications, logs = await self._fetch_all(session)

            owners = owner_ids(medications, logs if include_log_only_owners else [])
            identities = await self.resolve_identities(identity, owners, include_all_accounts)

            patients = consolidate_patient_data(
                medications,
                logs,
                identities=identities,
                include_log_only_owners=include_log_only_owners,
                resolver=self.resolver,
                extra_owner_ids=[i for i in identities if i not in owners]
            )
            logger.info(f"Consolidated {len(patients)} patients")
            return patients

        if db:
            return await _get(db)

        with get_db_context() as session:
            return await _get(session)

    async def get_all_users_stats(
        self,
        identity: IdentityProvider,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """
        Flat per-patient stat rows, largest medication lists first

        Registered accounts without any medications are included with zero
        counts.
        """
        patients = await self.get_patient_aggregates(identity, include_all_accounts=True, db=db)
        return [patient.stats_row() for patient in patients]

    async def _names_for(
        self,
        identity: IdentityProvider,
        records: Sequence
    ) -> Dict[str, ResolvedName]:
        identities = await self.resolve_identities(identity, owner_ids(records, []))
        return {user_id: self.resolver.resolve(i) for user_id, i in identities.items()}

    async def get_all_users_logs(
        self,
        identity: IdentityProvider,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """Every dose log, newest first, with owner name and medication name"""
        async def _get(session: Session) -> List[Dict[str, Any]]:
            logs = await self._fetch_all_logs(session)
            names = await self._names_for(identity, logs)

            enriched = []
            for log in logs:
                enriched.append({
                    "id": log.id,
                    "medication_id": log.medication_id,
                    "user_id": log.user_id,
                    "taken_at": log.taken_at,
                    "scheduled_time": log.scheduled_time,
                    "status": log.status.value,
                    "minutes_difference": log.minutes_difference,
                    "pill_name": log.medication.name if log.medication else "Unknown Pill",
                    **names[log.user_id].to_dict()
                })

            logger.info(f"Enhanced {len(enriched)} logs with user names")
            return enriched

        if db:
            return await _get(db)

        with get_db_context() as session:
            return await _get(session)

    async def get_all_users_medications(
        self,
        identity: IdentityProvider,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """Every medication, newest first, with owner name"""
        async def _get(session: Session) -> List[Dict[str, Any]]:
            medications = await self._fetch_all_medications(session)
            names = await self._names_for(identity, medications)

            enriched = [
                {
                    "id": m.id,
                    "user_id": m.user_id,
                    "name": m.name,
                    "time": m.time,
                    "taken": m.taken,
                    "taken_at": m.taken_at,
                    "created_at": m.created_at,
                    **names[m.user_id].to_dict()
                }
                for m in medications
            ]

            logger.info(f"Enhanced {len(enriched)} medications with user names")
            return enriched

        if db:
            return await _get(db)

        with get_db_context() as session:
            return await _get(session)


# Singleton instance
admin_service = AdminService()
