"""
Actions Module
Engines that act on the notification queue
"""

from .reminder_engine import (
    ReminderEngine,
    next_occurrence,
    reminder_keys,
)

__all__ = [
    "ReminderEngine",
    "next_occurrence",
    "reminder_keys",
]
