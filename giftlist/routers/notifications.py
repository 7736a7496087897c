"""
Notification API endpoints.

Handles in-app notification retrieval, read state and preferences.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from common.utils import success_response

from giftlist.config import settings
from giftlist.dependencies import require_auth, get_notification_service
from giftlist.schemas.notifications import UpdateNotificationPreferencesRequest


router = APIRouter(prefix="/notifications", tags=["Notifications"])


# =============================================================================
# Notification Endpoints
# =============================================================================

@router.get("")
async def get_notifications(
    user: Annotated[dict, Depends(require_auth)],
    limit: int = Query(default=settings.NOTIFICATION_PAGE_SIZE, ge=1, le=settings.NOTIFICATION_MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    unread_only: bool = Query(default=False)
):
    """
    Get rendered notifications for the current user.

    Args:
        limit: Maximum number of notifications
        offset: Number to skip for pagination
        unread_only: If true, only return unread notifications

    Returns:
        List of notifications with pagination info
    """
    service = get_notification_service()

    result = await service.get_notifications(
        user_id=user["user_id"],
        limit=limit,
        offset=offset,
        unread_only=unread_only
    )

    return success_response(result)


@router.get("/count")
async def get_unread_count(
    user: Annotated[dict, Depends(require_auth)]
):
    """Get count of unread notifications."""
    service = get_notification_service()
    count = await service.get_unread_count(user["user_id"])
    return success_response({"unread": count})


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Mark a notification as read."""
    service = get_notification_service()
    await service.mark_as_read(notification_id, user["user_id"])
    return success_response({"message": "Notification marked as read"})


@router.post("/read-all")
async def mark_all_as_read(
    user: Annotated[dict, Depends(require_auth)]
):
    """Mark all notifications as read."""
    service = get_notification_service()
    count = await service.mark_all_as_read(user["user_id"])

    return success_response({
        "message": f"Marked {count} notifications as read",
        "count": count
    })


# =============================================================================
# Preference Endpoints
# =============================================================================

@router.get("/preferences")
async def get_preferences(
    user: Annotated[dict, Depends(require_auth)]
):
    """Get the current user's notification preferences."""
    service = get_notification_service()
    preferences = await service.get_preferences(user["user_id"])
    return success_response(preferences)


@router.put("/preferences")
async def update_preferences(
    body: UpdateNotificationPreferencesRequest,
    user: Annotated[dict, Depends(require_auth)]
):
    """Update the current user's notification preferences."""
    service = get_notification_service()
    preferences = await service.update_preferences(
        user["user_id"],
        birthday_reminder_days=body.birthdayReminderDays,
    )
    return success_response(preferences)
