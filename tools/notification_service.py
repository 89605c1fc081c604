"""
Notification Service Tool
Local notification queue contract, in-process queue and notification session
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from config import policy, settings
from models import NotificationKind


logger = logging.getLogger(__name__)


class NotificationPriority(str, Enum):
    """Notification priority levels"""
    MAX = "max"
    HIGH = "high"
    DEFAULT = "default"
    LOW = "low"


@dataclass
class NotificationContent:
    """What the user sees, plus routing data for the tap handler"""
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)
    sound: Optional[str] = "default"
    channel_id: Optional[str] = None
    priority: NotificationPriority = NotificationPriority.DEFAULT

    @property
    def kind(self) -> Optional[str]:
        return self.data.get("type")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "data": dict(self.data),
            "sound": self.sound,
            "channel_id": self.channel_id,
            "priority": self.priority.value
        }


@dataclass
class ScheduledNotification:
    """A notification waiting in (or delivered from) the queue"""
    key: str
    content: NotificationContent
    trigger: Optional[datetime] = None  # None means immediate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "content": self.content.to_dict(),
            "trigger": self.trigger.isoformat() if self.trigger else None
        }


@dataclass
class NotificationHandlerConfig:
    """How notifications are presented while the app is in the foreground"""
    show_alert: bool = True
    play_sound: bool = True
    set_badge: bool = False


@dataclass
class NotificationChannelConfig:
    """Delivery channel for reminders"""
    id: str
    name: str
    importance: NotificationPriority = NotificationPriority.MAX
    vibration_pattern: List[int] = field(default_factory=lambda: [0, 250, 250, 250])
    light_color: str = "#FF231F7C"
    sound: str = "default"


@dataclass(frozen=True)
class Subscription:
    """Handle returned when a listener is registered"""
    id: str
    event: str


NotificationListener = Callable[[ScheduledNotification], None]


class NotificationBackend(ABC):
    """
    Contract of the OS-level local notification service.

    Occurrences are keyed; scheduling an existing key replaces it.
    """

    @abstractmethod
    async def cancel(self, key: str) -> None:
        """Cancel a pending occurrence; unknown keys are ignored"""

    @abstractmethod
    async def schedule_at(
        self,
        key: str,
        content: NotificationContent,
        trigger: datetime
    ) -> str:
        """Schedule content for delivery at an instant"""

    @abstractmethod
    async def schedule_now(self, content: NotificationContent) -> str:
        """Deliver content immediately"""

    @abstractmethod
    async def list_scheduled(self) -> List[ScheduledNotification]:
        """Pending occurrences"""

    @abstractmethod
    async def set_handler(self, config: Optional[NotificationHandlerConfig]) -> None:
        """Install (or clear with None) the foreground presentation handler"""

    @abstractmethod
    async def set_channel(self, channel: NotificationChannelConfig) -> None:
        """Create or update a delivery channel"""

    @abstractmethod
    async def request_permissions(self) -> bool:
        """Ask for permission to show notifications"""

    @abstractmethod
    def add_received_listener(self, listener: NotificationListener) -> Subscription:
        """Called when a notification is delivered"""

    @abstractmethod
    def add_response_listener(self, listener: NotificationListener) -> Subscription:
        """Called when the user taps a delivered notification"""

    @abstractmethod
    def remove_listener(self, subscription: Subscription) -> None:
        """Unregister a listener"""


class LocalNotificationQueue(NotificationBackend):
    """
    In-process notification queue.

    Holds pending occurrences by key and fires listeners on delivery and tap.
    Used in development and tests where no device notification service exists.
    """

    def __init__(
        self,
        permissions_granted: bool = True,
        history_limit: int = policy.DELIVERED_HISTORY_LIMIT
    ):
        self._pending: Dict[str, ScheduledNotification] = {}
        # Oldest deliveries fall off once the limit is reached
        self._delivered: Deque[ScheduledNotification] = deque(maxlen=history_limit)
        self._listeners: Dict[str, Dict[str, NotificationListener]] = {
            "received": {},
            "response": {}
        }
        self._permissions_granted = permissions_granted
        self.handler: Optional[NotificationHandlerConfig] = None
        self.channels: Dict[str, NotificationChannelConfig] = {}

    async def cancel(self, key: str) -> None:
        self._pending.pop(key, None)

    async def schedule_at(
        self,
        key: str,
        content: NotificationContent,
        trigger: datetime
    ) -> str:
        self._pending[key] = ScheduledNotification(key=key, content=content, trigger=trigger)
        return key

    async def schedule_now(self, content: NotificationContent) -> str:
        notification = ScheduledNotification(key=uuid.uuid4().hex, content=content)
        self._deliver(notification)
        return notification.key

    async def list_scheduled(self) -> List[ScheduledNotification]:
        return sorted(self._pending.values(), key=lambda n: (n.trigger, n.key))

    async def set_handler(self, config: Optional[NotificationHandlerConfig]) -> None:
        self.handler = config

    async def set_channel(self, channel: NotificationChannelConfig) -> None:
        self.channels[channel.id] = channel

    async def request_permissions(self) -> bool:
        return self._permissions_granted

    def add_received_listener(self, listener: NotificationListener) -> Subscription:
        return self._add_listener("received", listener)

    def add_response_listener(self, listener: NotificationListener) -> Subscription:
        return self._add_listener("response", listener)

    def remove_listener(self, subscription: Subscription) -> None:
        self._listeners.get(subscription.event, {}).pop(subscription.id, None)

    def _add_listener(self, event: str, listener: NotificationListener) -> Subscription:
        subscription = Subscription(id=uuid.uuid4().hex, event=event)
        self._listeners[event][subscription.id] = listener
        return subscription

    def listener_count(self, event: str) -> int:
        return len(self._listeners[event])

    @property
    def delivered(self) -> List[ScheduledNotification]:
        return list(self._delivered)

    def _deliver(self, notification: ScheduledNotification) -> None:
        self._delivered.append(notification)
        for listener in list(self._listeners["received"].values()):
            listener(notification)

    def deliver_due(self, now: Optional[datetime] = None) -> List[ScheduledNotification]:
        """Deliver every pending occurrence whose trigger has passed"""
        now = now or datetime.now()
        due = [n for n in self._pending.values() if n.trigger is not None and n.trigger <= now]
        for notification in sorted(due, key=lambda n: n.trigger):
            del self._pending[notification.key]
            self._deliver(notification)
        return due

    def respond(self, key: str) -> ScheduledNotification:
        """Simulate the user tapping a delivered notification"""
        for notification in reversed(self._delivered):
            if notification.key == key:
                for listener in list(self._listeners["response"].values()):
                    listener(notification)
                return notification
        raise KeyError(f"No delivered notification with key {key}")


ReminderTapHandler = Callable[[Dict[str, Any]], None]


class NotificationSession:
    """
    Foreground notification configuration and listeners for one process.

    Initialize once at startup and tear down on shutdown; nothing is
    registered with the backend outside that window.
    """

    def __init__(
        self,
        backend: NotificationBackend,
        handler_config: Optional[NotificationHandlerConfig] = None,
        channel: Optional[NotificationChannelConfig] = None,
        on_reminder_tap: Optional[ReminderTapHandler] = None
    ):
        self.backend = backend
        self.handler_config = handler_config or NotificationHandlerConfig()
        self.channel = channel or NotificationChannelConfig(
            id=settings.NOTIFICATION_CHANNEL_ID,
            name=settings.NOTIFICATION_CHANNEL_NAME
        )
        self.on_reminder_tap = on_reminder_tap
        self.permissions_granted = False
        self._subscriptions: List[Subscription] = []

    @property
    def initialized(self) -> bool:
        return bool(self._subscriptions)

    async def initialize(self) -> bool:
        """
        Install the handler and channel, request permissions and register
        the received/response listeners.

        Returns:
            Whether notification permissions were granted
        """
        if self.initialized:
            raise RuntimeError("Notification session already initialized")

        await self.backend.set_handler(self.handler_config)
        await self.backend.set_channel(self.channel)

        try:
            self.permissions_granted = await self.backend.request_permissions()
        except Exception as e:
            logger.error(f"Error setting up notifications: {e}")
            self.permissions_granted = False

        if self.permissions_granted:
            logger.info("Notification permissions granted")
        else:
            logger.warning("Notification permissions not granted")

        self._subscriptions = [
            self.backend.add_received_listener(self._on_received),
            self.backend.add_response_listener(self._on_response),
        ]
        return self.permissions_granted

    async def teardown(self) -> None:
        """Remove listeners and the foreground handler"""
        for subscription in self._subscriptions:
            self.backend.remove_listener(subscription)
        self._subscriptions = []
        await self.backend.set_handler(None)
        logger.info("Notification session closed")

    def _on_received(self, notification: ScheduledNotification) -> None:
        logger.info(f"Notification received: {notification.content.title}")

    def _on_response(self, notification: ScheduledNotification) -> None:
        data = notification.content.data
        logger.info(f"Notification tapped: {data}")

        if data.get("type") == NotificationKind.DAILY_REMINDER.value:
            logger.info(f"User tapped reminder for: {data.get('pill_name')}")
            if self.on_reminder_tap:
                self.on_reminder_tap(data)


# Process-wide queue used when no device backend is configured
local_notification_queue = LocalNotificationQueue()
