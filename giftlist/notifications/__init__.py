"""
Notification types, registry and rendering.
"""

from giftlist.notifications.catalog import build_default_registry
from giftlist.notifications.registry import (
    NotificationTypeEntry,
    NotificationTypeRegistry,
    UnknownNotificationTypeError,
)
from giftlist.notifications.renderer import (
    NotificationRenderer,
    NotificationView,
    RenderedNotification,
)
from giftlist.notifications.types import NotificationCategory, NotificationType

__all__ = [
    "build_default_registry",
    "NotificationTypeEntry",
    "NotificationTypeRegistry",
    "UnknownNotificationTypeError",
    "NotificationRenderer",
    "NotificationView",
    "RenderedNotification",
    "NotificationCategory",
    "NotificationType",
]
