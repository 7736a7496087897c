"""
Notification services.

Handles in-app notification creation and retrieval.
"""

from giftlist.services.notifications.notification_service import NotificationService

__all__ = ["NotificationService"]
