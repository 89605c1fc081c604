"""
Notifications API Router
Inspection of pending reminder notifications
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from actions.reminder_engine import ReminderEngine
from api.deps import get_reminder_engine, verify_admin_key
from api.schemas.notification import ScheduledNotificationList, ScheduledNotificationResponse


router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(verify_admin_key)]
)


@router.get("/scheduled", response_model=ScheduledNotificationList)
async def list_scheduled_notifications(
    medication_id: Optional[int] = Query(None, description="Only this medication's reminders"),
    reminders: ReminderEngine = Depends(get_reminder_engine)
):
    """
    List pending notifications, soonest first
    """
    if medication_id is None:
        pending = await reminders.list_scheduled()
    else:
        pending = await reminders.scheduled_for(medication_id)

    notifications = [
        ScheduledNotificationResponse(
            key=n.key,
            title=n.content.title,
            body=n.content.body,
            data=n.content.data,
            trigger=n.trigger
        )
        for n in pending
    ]
    return ScheduledNotificationList(notifications=notifications, total=len(notifications))
