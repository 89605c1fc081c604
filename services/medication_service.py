"""
Medication Service
Business logic for a user's medications, dose logging and reminders
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from database import get_db_context
import models
from errors import InvalidMedicationNameError, MedicationNotFoundError
from actions.reminder_engine import ReminderEngine
from tools.identity_provider import IdentityProvider, require_current_user
from tools.notification_service import local_notification_queue
from tools.timing_classifier import (
    TimingResult,
    classify_timing,
    format_time_of_day,
    parse_time_of_day,
)


logger = logging.getLogger(__name__)


@dataclass
class DoseTakenResult:
    """A new dose log together with its timing classification"""
    log: models.DoseLog
    timing: TimingResult


def normalize_time(value: str) -> str:
    """Validate an HH:MM time and return it zero padded"""
    return format_time_of_day(*parse_time_of_day(value))


def normalize_name(value: str) -> str:
    """Strip a medication name; blank names are rejected"""
    name = (value or "").strip()
    if not name:
        raise InvalidMedicationNameError(value)
    return name


def _schedule_sort_key(medication: models.Medication):
    try:
        return parse_time_of_day(medication.time or "00:00")
    except ValueError:
        return (0, 0)


class MedicationService:
    """
    Service for a user's medications

    Every operation acts on the signed-in user's own records and fails
    with NotAuthenticatedError when nobody is signed in.
    """

    def __init__(
        self,
        reminders: Optional[ReminderEngine] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.reminders = reminders or ReminderEngine(local_notification_queue)
        self.clock = clock

    def _get_owned(self, session: Session, user_id: str, medication_id: int) -> models.Medication:
        medication = session.query(models.Medication).filter(
            models.Medication.id == medication_id,
            models.Medication.user_id == user_id
        ).first()

        if not medication:
            raise MedicationNotFoundError(medication_id)
        return medication

    async def get_user_medications(
        self,
        identity: IdentityProvider,
        db: Optional[Session] = None
    ) -> List[models.Medication]:
        """Signed-in user's medications, newest first"""
        user = await require_current_user(identity)

        def _get(session: Session) -> List[models.Medication]:
            medications = session.query(models.Medication).filter(
                models.Medication.user_id == user.id
            ).order_by(
                models.Medication.created_at.desc(),
                models.Medication.id.desc()
            ).all()

            logger.info(f"Retrieved {len(medications)} medications for user {user.id}")
            return medications

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def add_medication(
        self,
        identity: IdentityProvider,
        name: str,
        time: str,
        db: Optional[Session] = None
    ) -> models.Medication:
        """
        Add a medication and schedule its reminders

        Args:
            identity: Identity provider for the request
            name: Display name
            time: Daily time of day, "HH:MM"
            db: Database session

        Returns:
            Created Medication; it is kept even if reminders fail
        """
        user = await require_current_user(identity)
        scheduled_time = normalize_time(time)
        name = normalize_name(name)

        def _add(session: Session) -> models.Medication:
            medication = models.Medication(
                user_id=user.id,
                name=name,
                time=scheduled_time,
                taken=False,
                created_at=self.clock()
            )

            session.add(medication)
            session.commit()
            session.refresh(medication)

            logger.info(f"Medication saved: {medication.name} at {medication.time}")
            return medication

        if db:
            medication = _add(db)
        else:
            with get_db_context() as session:
                medication = _add(session)

        if not await self.reminders.schedule_medication(medication):
            logger.warning("Notification scheduling failed, but medication was saved")

        return medication

    async def update_medication(
        self,
        identity: IdentityProvider,
        medication_id: int,
        name: Optional[str] = None,
        time: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.Medication:
        """Rename or retime a medication and replace its reminders"""
        user = await require_current_user(identity)
        scheduled_time = normalize_time(time) if time is not None else None
        name = normalize_name(name) if name is not None else None

        def _update(session: Session) -> models.Medication:
            medication = self._get_owned(session, user.id, medication_id)

            if name is not None:
                medication.name = name
            if scheduled_time is not None:
                medication.time = scheduled_time
            medication.updated_at = self.clock()

            session.commit()
            session.refresh(medication)

            logger.info(f"Medication {medication_id} updated: {medication.name} at {medication.time}")
            return medication

        if db:
            medication = _update(db)
        else:
            with get_db_context() as session:
                medication = _update(session)

        if not await self.reminders.schedule_medication(medication):
            logger.warning("Notification rescheduling failed, but medication was updated")

        return medication

    def _insert_dose_log(
        self,
        session: Session,
        medication: models.Medication,
        scheduled_time: str,
        taken_at: datetime
    ) -> DoseTakenResult:
        timing = classify_timing(scheduled_time, taken_at)

        log = models.DoseLog(
            medication_id=medication.id,
            user_id=medication.user_id,
            taken_at=taken_at,
            scheduled_time=scheduled_time,
            status=timing.status,
            minutes_difference=timing.minutes
        )
        session.add(log)
        return DoseTakenResult(log=log, timing=timing)

    async def log_pill_taken(
        self,
        identity: IdentityProvider,
        medication_id: int,
        scheduled_time: str,
        db: Optional[Session] = None
    ) -> DoseTakenResult:
        """
        Record that a dose was taken now and confirm it to the user

        Args:
            identity: Identity provider for the request
            medication_id: Medication the dose belongs to
            scheduled_time: "HH:MM" the dose is compared against
            db: Database session

        Returns:
            DoseTakenResult with the stored log and its timing
        """
        user = await require_current_user(identity)
        scheduled_time = normalize_time(scheduled_time)

        def _log(session: Session) -> DoseTakenResult:
            medication = self._get_owned(session, user.id, medication_id)
            result = self._insert_dose_log(session, medication, scheduled_time, self.clock())
            session.commit()
            session.refresh(result.log)

            logger.info(f"Dose logged for medication {medication_id}: {result.timing.status.value}")
            return result

        if db:
            result = _log(db)
        else:
            with get_db_context() as session:
                result = _log(session)

        await self.reminders.send_taken_confirmation(result.timing)
        return result

    async def update_medication_status(
        self,
        identity: IdentityProvider,
        medication_id: int,
        taken: bool,
        scheduled_time: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.Medication:
        """
        Mark a medication taken or not taken for today

        Taking it with a scheduled time also logs the dose; untaking clears
        the taken timestamp and leaves earlier logs alone.
        """
        user = await require_current_user(identity)
        if taken and scheduled_time is not None:
            scheduled_time = normalize_time(scheduled_time)

        async def _update(session: Session) -> models.Medication:
            medication = self._get_owned(session, user.id, medication_id)

            if taken and scheduled_time is not None:
                await self.log_pill_taken(identity, medication_id, scheduled_time, db=session)

            now = self.clock()
            medication.taken = taken
            medication.taken_at = now if taken else None
            medication.updated_at = now

            session.commit()
            session.refresh(medication)

            logger.info(f"Medication status updated: {'taken' if taken else 'not taken'}")
            return medication

        if db:
            return await _update(db)

        with get_db_context() as session:
            medication = await _update(session)
            return medication

    async def get_pill_logs(
        self,
        identity: IdentityProvider,
        medication_id: int,
        db: Optional[Session] = None
    ) -> List[models.DoseLog]:
        """A medication's dose logs, newest first"""
        user = await require_current_user(identity)

        def _get(session: Session) -> List[models.DoseLog]:
            logs = session.query(models.DoseLog).filter(
                models.DoseLog.medication_id == medication_id,
                models.DoseLog.user_id == user.id
            ).order_by(
                models.DoseLog.taken_at.desc(),
                models.DoseLog.id.desc()
            ).all()

            logger.info(f"Retrieved {len(logs)} logs for medication {medication_id}")
            return logs

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def delete_medication(
        self,
        identity: IdentityProvider,
        medication_id: int,
        db: Optional[Session] = None
    ) -> bool:
        """Cancel a medication's reminders, then delete its logs and itself"""
        user = await require_current_user(identity)

        async def _delete(session: Session) -> bool:
            medication = self._get_owned(session, user.id, medication_id)

            await self.reminders.cancel_medication(medication.id)

            session.query(models.DoseLog).filter(
                models.DoseLog.medication_id == medication.id,
                models.DoseLog.user_id == user.id
            ).delete(synchronize_session=False)
            session.delete(medication)
            session.commit()

            logger.info(f"Medication {medication_id} deleted")
            return True

        if db:
            return await _delete(db)

        with get_db_context() as session:
            return await _delete(session)

    async def reset_daily_medications(
        self,
        identity: IdentityProvider,
        db: Optional[Session] = None
    ) -> List[models.Medication]:
        """Clear the taken flag on every one of the user's medications"""
        user = await require_current_user(identity)

        def _reset(session: Session) -> List[models.Medication]:
            medications = session.query(models.Medication).filter(
                models.Medication.user_id == user.id
            ).all()

            now = self.clock()
            for medication in medications:
                medication.taken = False
                medication.taken_at = None
                medication.updated_at = now

            session.commit()
            logger.info(f"Reset {len(medications)} medications for new day")
            return medications

        if db:
            return _reset(db)

        with get_db_context() as session:
            return _reset(session)

    async def get_today_schedule(
        self,
        identity: IdentityProvider,
        db: Optional[Session] = None
    ) -> List[models.Medication]:
        """User's medications ordered by time of day"""
        medications = await self.get_user_medications(identity, db=db)
        return sorted(medications, key=_schedule_sort_key)


# Singleton instance
medication_service = MedicationService()
