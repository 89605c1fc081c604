"""
Tools Package
Timing, identity and notification tools for the PillTracker system
"""

from .timing_classifier import (
    TimingResult,
    classify_timing,
    describe_timing,
    parse_time_of_day,
    format_time_of_day,
)

from .identity_provider import (
    Identity,
    IdentityProvider,
    DatabaseIdentityProvider,
    HttpIdentityProvider,
    require_current_user,
)

from .name_resolver import (
    NameResolver,
    ResolvedName,
    name_resolver,
    placeholder_identity,
)

from .notification_service import (
    NotificationBackend,
    LocalNotificationQueue,
    NotificationContent,
    NotificationSession,
    ScheduledNotification,
    local_notification_queue,
)

__all__ = [
    # Timing
    "TimingResult",
    "classify_timing",
    "describe_timing",
    "parse_time_of_day",
    "format_time_of_day",
    # Identity
    "Identity",
    "IdentityProvider",
    "DatabaseIdentityProvider",
    "HttpIdentityProvider",
    "require_current_user",
    # Names
    "NameResolver",
    "ResolvedName",
    "name_resolver",
    "placeholder_identity",
    # Notifications
    "NotificationBackend",
    "LocalNotificationQueue",
    "NotificationContent",
    "NotificationSession",
    "ScheduledNotification",
    "local_notification_queue",
]
