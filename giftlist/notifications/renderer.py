"""
Notification renderer.

Turns a stored notification into display output using only its type and
metadata. Rendering never raises: unknown types and malformed metadata
produce a fallback view.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from giftlist.notifications.registry import (
    NotificationTypeRegistry,
    UnknownNotificationTypeError,
)

logger = logging.getLogger(__name__)

FALLBACK_COMPONENT = "fallback"
FALLBACK_TITLE = "Notification"


@dataclass(frozen=True)
class NotificationView:
    """Presentation hints for a rendered notification."""

    component: str
    notification_type: str
    unread: bool
    icon: Optional[str] = None
    color: Optional[str] = None
    action_url: Optional[str] = None
    badge: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "type": self.notification_type,
            "unread": self.unread,
            "icon": self.icon,
            "color": self.color,
            "actionUrl": self.action_url,
            "badge": self.badge,
        }


@dataclass(frozen=True)
class RenderedNotification:
    title: str
    message: str
    view: NotificationView

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "message": self.message,
            "view": self.view.to_dict(),
        }


class NotificationRenderer:
    """
    Renders notification documents against a frozen type registry.
    """

    def __init__(self, registry: NotificationTypeRegistry):
        self._registry = registry

    def render(self, notification: Dict[str, Any]) -> RenderedNotification:
        """
        Render a notification.

        Args:
            notification: Stored notification document (type, metadata, readAt)

        Returns:
            RenderedNotification with title, message and view
        """
        notification_type = str(notification.get("type") or "")
        unread = notification.get("readAt") is None

        try:
            entry = self._registry.lookup(notification_type)
        except UnknownNotificationTypeError:
            logger.debug(f"No registry entry for notification type '{notification_type}'")
            return self._fallback(notification_type, unread)

        try:
            metadata = entry.parse(notification.get("metadata"))
        except ValidationError as e:
            logger.warning(
                f"Invalid metadata on {notification_type} notification "
                f"{notification.get('_id')}: {e.error_count()} error(s)"
            )
            return self._fallback(notification_type, unread)

        view = NotificationView(
            component=entry.component,
            notification_type=notification_type,
            unread=unread,
            icon=entry.icon,
            color=entry.color,
            action_url=entry.action_url(metadata),
            badge=entry.badge(metadata) if entry.badge else None,
        )

        return RenderedNotification(
            title=entry.title(metadata),
            message=entry.message(metadata),
            view=view,
        )

    @staticmethod
    def _fallback(notification_type: str, unread: bool) -> RenderedNotification:
        return RenderedNotification(
            title=FALLBACK_TITLE,
            message="",
            view=NotificationView(
                component=FALLBACK_COMPONENT,
                notification_type=notification_type,
                unread=unread,
            ),
        )
