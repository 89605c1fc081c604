"""
Reminder Engine
Keeps each medication's daily reminder and its backup in the notification queue
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Tuple

from config import policy, settings
from models import NotificationKind
from tools.notification_service import (
    NotificationBackend,
    NotificationContent,
    NotificationPriority,
    ScheduledNotification,
)
from tools.timing_classifier import TimingResult, describe_timing, parse_time_of_day


logger = logging.getLogger(__name__)


def reminder_keys(medication_id: Any) -> Tuple[str, str]:
    """Primary and backup notification keys for a medication"""
    primary = f"{policy.REMINDER_KEY_PREFIX}{medication_id}"
    return primary, f"{primary}{policy.BACKUP_KEY_SUFFIX}"


def next_occurrence(hour: int, minute: int, now: datetime) -> datetime:
    """Next instant at hour:minute; a time that is not after now rolls over"""
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += policy.REMINDER_ROLLOVER
    return candidate


class ReminderEngine:
    """
    Schedules medication reminders on a notification backend.

    Every medication owns exactly two pending occurrences: the primary at
    the next matching time of day and a backup one day later. Scheduling
    always replaces whatever was queued for the medication before.
    """

    def __init__(
        self,
        backend: NotificationBackend,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.backend = backend
        self.clock = clock

    def _reminder_content(self, medication_id: Any, name: str, time_of_day: str) -> NotificationContent:
        return NotificationContent(
            title="💊 Time for your medication!",
            body=f"Time to take {name}",
            sound="default",
            channel_id=settings.NOTIFICATION_CHANNEL_ID,
            priority=NotificationPriority.MAX,
            data={
                "pill_id": medication_id,
                "pill_name": name,
                "scheduled_time": time_of_day,
                "type": NotificationKind.DAILY_REMINDER.value
            }
        )

    async def schedule_medication(self, medication) -> bool:
        """
        Replace the medication's reminders with a fresh primary and backup.

        Returns:
            False if scheduling failed; the failure is logged, not raised
        """
        try:
            hour, minute = parse_time_of_day(medication.time)
            primary_key, backup_key = reminder_keys(medication.id)

            await self.backend.cancel(primary_key)
            await self.backend.cancel(backup_key)

            primary_at = next_occurrence(hour, minute, self.clock())
            backup_at = primary_at + policy.BACKUP_REMINDER_OFFSET
            content = self._reminder_content(medication.id, medication.name, medication.time)

            await self.backend.schedule_at(primary_key, content, primary_at)
            await self.backend.schedule_at(backup_key, content, backup_at)

            logger.info(
                f"Scheduled reminders for {medication.name}: "
                f"{primary_at.isoformat()} (backup {backup_at.isoformat()})"
            )
            return True

        except Exception as e:
            logger.error(f"Failed to schedule notification for {medication.name}: {e}")
            return False

    async def cancel_medication(self, medication_id: Any) -> None:
        """Cancel both of a medication's reminders"""
        for key in reminder_keys(medication_id):
            await self.backend.cancel(key)
        logger.info(f"Cancelled reminders for medication {medication_id}")

    async def send_taken_confirmation(self, timing: TimingResult) -> bool:
        """Post an immediate confirmation; failures are logged, not raised"""
        content = NotificationContent(
            title="✅ Medication taken",
            body=describe_timing(timing).capitalize(),
            sound="default",
            channel_id=settings.NOTIFICATION_CHANNEL_ID,
            data={"type": NotificationKind.CONFIRMATION.value}
        )
        try:
            await self.backend.schedule_now(content)
            return True
        except Exception as e:
            logger.warning(f"Taken confirmation could not be sent: {e}")
            return False

    async def list_scheduled(self) -> List[ScheduledNotification]:
        """Pending reminders (debug)"""
        scheduled = await self.backend.list_scheduled()
        logger.info(f"Scheduled notifications: {len(scheduled)}")
        for index, notification in enumerate(scheduled, start=1):
            logger.debug(
                f"{index}. {notification.key}: {notification.content.title} "
                f"at {notification.trigger}"
            )
        return scheduled

    async def scheduled_for(self, medication_id: Any) -> List[ScheduledNotification]:
        keys = set(reminder_keys(medication_id))
        return [n for n in await self.backend.list_scheduled() if n.key in keys]

