"""
Notification service for in-app notifications.

Handles creation, retrieval, and read-state of user notifications.
Display content is not stored: it is rendered from type and metadata on
every read.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import NotFoundException, ValidationException
from giftlist.database.collections import NOTIFICATIONS, USERS
from giftlist.database.ids import to_object_id, to_user_id
from giftlist.notifications.registry import (
    NotificationTypeRegistry,
    UnknownNotificationTypeError,
)
from giftlist.notifications.renderer import NotificationRenderer

logger = logging.getLogger(__name__)

MAX_BIRTHDAY_REMINDER_DAYS = 30


def validate_reminder_days(value: Any) -> int:
    """
    Check a birthday reminder preference.

    Raises:
        ValueError: If the value is not an integer between 0 and 30
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Birthday reminder days must be an integer, got {value!r}")
    if not 0 <= value <= MAX_BIRTHDAY_REMINDER_DAYS:
        raise ValueError(
            f"Birthday reminder days must be between 0 and {MAX_BIRTHDAY_REMINDER_DAYS}"
        )
    return value


class NotificationService:
    """
    Handles in-app notification management.

    Notification types are whatever the registry holds; see
    `giftlist.notifications.catalog` for the built-in set.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        registry: NotificationTypeRegistry,
        renderer: Optional[NotificationRenderer] = None,
        default_reminder_days: int = 3,
    ):
        """
        Initialize NotificationService.

        Args:
            db: MongoDB database connection
            registry: Frozen notification type registry
            renderer: Renderer for read paths (built from registry if omitted)
            default_reminder_days: Birthday reminder preference for users who
                have not set one
        """
        self._db = db
        self._registry = registry
        self._renderer = renderer or NotificationRenderer(registry)
        self._default_reminder_days = default_reminder_days
        self._collection = db[NOTIFICATIONS]
        self._users_collection = db[USERS]

    def _build_document(
        self,
        user_id: str,
        notification_type: str,
        metadata: Optional[Dict[str, Any]],
        dedup_key: Optional[str],
    ) -> Dict[str, Any]:
        try:
            entry = self._registry.lookup(notification_type)
        except UnknownNotificationTypeError:
            raise ValidationException(
                message=f"Unknown notification type '{notification_type}'",
                code="UNKNOWN_NOTIFICATION_TYPE"
            )

        try:
            parsed = entry.parse(metadata)
        except ValidationError as e:
            raise ValidationException(
                message=f"Invalid metadata for notification type '{entry.type}'",
                code="INVALID_NOTIFICATION_METADATA",
                errors=[
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ]
            )

        return {
            "userId": to_user_id(user_id),
            "type": entry.type,
            "category": entry.category.value,
            "metadata": parsed.model_dump(exclude_none=True),
            "priority": entry.priority,
            "dedupKey": dedup_key,
            "readAt": None,
            "createdAt": datetime.now(timezone.utc),
        }

    async def create_notification(
        self,
        user_id: str,
        notification_type: str,
        metadata: Optional[Dict[str, Any]] = None,
        dedup_key: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Create a new notification for a user.

        Args:
            user_id: Recipient user ID
            notification_type: Registered notification type
            metadata: Type-specific payload, validated against the type's model
            dedup_key: Optional key; a second notification with the same key
                for the same recipient is skipped

        Returns:
            Created notification document, or None if it was a duplicate

        Raises:
            ValidationException: Unknown type or invalid metadata
        """
        notification_doc = self._build_document(
            user_id, notification_type, metadata, dedup_key
        )

        if dedup_key:
            existing = await self._collection.find_one(
                {"userId": notification_doc["userId"], "dedupKey": dedup_key},
                {"_id": 1}
            )
            if existing:
                logger.debug(f"Skipping duplicate notification {dedup_key} for user {user_id}")
                return None

        try:
            result = await self._collection.insert_one(notification_doc)
        except DuplicateKeyError:
            logger.debug(f"Skipping duplicate notification {dedup_key} for user {user_id}")
            return None

        notification_doc["_id"] = result.inserted_id

        logger.info(f"Created notification for user {user_id}: {notification_doc['type']}")
        return notification_doc

    async def create_for_users(
        self,
        user_ids: List[str],
        notification_type: str,
        metadata: Optional[Dict[str, Any]] = None,
        dedup_key: Optional[str] = None,
    ) -> int:
        """
        Create the same notification for several recipients.

        Metadata is validated once, before anything is written.

        Returns:
            Number of notifications created
        """
        if not user_ids:
            return 0

        # Validate up front so a bad payload writes nothing
        self._build_document(user_ids[0], notification_type, metadata, dedup_key)

        created = 0
        for user_id in dict.fromkeys(user_ids):
            if await self.create_notification(user_id, notification_type, metadata, dedup_key):
                created += 1

        return created

    async def get_notifications(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False
    ) -> Dict[str, Any]:
        """
        Get rendered notifications for a user with pagination.

        Args:
            user_id: User ID
            limit: Maximum number of notifications to return
            offset: Number of notifications to skip
            unread_only: If True, only return unread notifications

        Returns:
            Dict with notifications list, total count, and hasMore flag
        """
        query = {"userId": to_user_id(user_id)}
        if unread_only:
            query["readAt"] = None

        total = await self._collection.count_documents(query)

        cursor = self._collection.find(query).sort(
            "createdAt", -1
        ).skip(offset).limit(limit)

        notifications = await cursor.to_list(length=limit)

        formatted = [self.format_notification(notif) for notif in notifications]
        has_more = (offset + len(notifications)) < total

        return {
            "notifications": formatted,
            "total": total,
            "hasMore": has_more
        }

    def format_notification(self, notification: Dict[str, Any]) -> Dict[str, Any]:
        """Render a notification document for API responses."""
        rendered = self._renderer.render(notification)
        return {
            "id": str(notification["_id"]),
            "type": notification.get("type"),
            "category": notification.get("category"),
            "title": rendered.title,
            "message": rendered.message,
            "view": rendered.view.to_dict(),
            "metadata": notification.get("metadata") or {},
            "priority": notification.get("priority"),
            "read": notification.get("readAt") is not None,
            "readAt": notification["readAt"].isoformat() if notification.get("readAt") else None,
            "createdAt": notification["createdAt"].isoformat() if notification.get("createdAt") else None
        }

    async def get_unread_count(self, user_id: str) -> int:
        """
        Get count of unread notifications for a user.
        """
        return await self._collection.count_documents({
            "userId": to_user_id(user_id),
            "readAt": None
        })

    async def mark_as_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        """
        Mark a notification as read.

        Marking an already read notification keeps its original readAt.

        Args:
            notification_id: Notification ID
            user_id: User ID (for ownership verification)

        Returns:
            Updated notification document

        Raises:
            NotFoundException: If notification not found or doesn't belong to user
        """
        oid = to_object_id(notification_id, "Notification not found", "NOTIFICATION_NOT_FOUND")
        notification = await self._collection.find_one({
            "_id": oid,
            "userId": to_user_id(user_id)
        })

        if not notification:
            raise NotFoundException(
                message="Notification not found",
                code="NOTIFICATION_NOT_FOUND"
            )

        if notification.get("readAt") is not None:
            return notification

        now = datetime.now(timezone.utc)
        await self._collection.update_one(
            {"_id": oid, "readAt": None},
            {"$set": {"readAt": now}}
        )

        notification["readAt"] = now

        logger.info(f"Notification {notification_id} marked as read for user {user_id}")
        return notification

    async def mark_all_as_read(self, user_id: str) -> int:
        """
        Mark all unread notifications as read for a user.

        Returns:
            Number of notifications marked as read
        """
        now = datetime.now(timezone.utc)
        result = await self._collection.update_many(
            {
                "userId": to_user_id(user_id),
                "readAt": None
            },
            {"$set": {"readAt": now}}
        )

        logger.info(f"Marked {result.modified_count} notifications as read for user {user_id}")
        return result.modified_count

    # ─────────────────────────────────────────────────────────────
    # Preferences
    # ─────────────────────────────────────────────────────────────

    async def get_preferences(self, user_id: str) -> Dict[str, Any]:
        """
        Get a user's notification preferences, with defaults filled in.
        """
        user = await self._users_collection.find_one(
            {"_id": to_user_id(user_id)},
            {"notificationPreferences": 1}
        )
        prefs = (user or {}).get("notificationPreferences") or {}

        days = prefs.get("birthdayReminderDays")
        if days is None:
            days = self._default_reminder_days
        else:
            try:
                days = validate_reminder_days(days)
            except ValueError:
                logger.warning(f"Ignoring invalid birthday reminder preference for user {user_id}: {days!r}")
                days = self._default_reminder_days

        return {"birthdayReminderDays": days}

    async def update_preferences(
        self,
        user_id: str,
        birthday_reminder_days: int,
    ) -> Dict[str, Any]:
        """
        Update a user's notification preferences.

        Args:
            user_id: User ID
            birthday_reminder_days: Days ahead of a friend's birthday to be
                reminded, 0 to turn reminders off

        Raises:
            ValidationException: If the value is outside 0-30
        """
        try:
            days = validate_reminder_days(birthday_reminder_days)
        except ValueError as e:
            raise ValidationException(message=str(e), code="INVALID_REMINDER_DAYS")

        await self._users_collection.update_one(
            {"_id": to_user_id(user_id)},
            {"$set": {
                "notificationPreferences.birthdayReminderDays": days,
                "updatedAt": datetime.now(timezone.utc),
            }},
            upsert=True
        )

        logger.info(f"Birthday reminder preference for user {user_id} set to {days}")
        return {"birthdayReminderDays": days}
