"""
Wishlist collaboration pipeline functions.

Orchestrates collaborator changes and archiving on wishlists, including
the notifications sent to the people involved.
"""

import logging
from typing import Dict, Any

from giftlist.database.collections import USERS
from giftlist.database.ids import to_user_id
from giftlist.notifications.types import NotificationType
from giftlist.services.notifications.notification_service import NotificationService
from giftlist.services.wishlists.wishlist_service import WishlistService

logger = logging.getLogger(__name__)


async def _display_name(db, user_id: str, default: str) -> str:
    if db is None:
        return default
    user = await db[USERS].find_one({"_id": to_user_id(user_id)}, {"displayName": 1})
    if not user:
        return default
    return user.get("displayName") or default


async def add_collaborator(
    wishlist_service: WishlistService,
    notification_service: NotificationService,
    db,
    user_id: str,
    wishlist_id: str,
    friend_id: str,
) -> Dict[str, Any]:
    """
    Add a friend as collaborator on a wishlist.

    1. Add the collaborator (primary owner, friends only)
    2. Notify the new collaborator
    3. Return the updated wishlist
    """
    # 1. Add
    wishlist = await wishlist_service.add_collaborator(wishlist_id, user_id, friend_id)

    # 2. Notify
    try:
        inviter_name = await _display_name(db, user_id, "A friend")
        await notification_service.create_notification(
            user_id=friend_id,
            notification_type=NotificationType.COLLABORATOR_INVITED.value,
            metadata={
                "wishlist_id": wishlist["id"],
                "wishlist_name": wishlist["name"],
                "inviter_id": user_id,
                "inviter_name": inviter_name,
            },
        )
    except Exception as e:
        logger.warning(f"Failed to notify collaborator {friend_id}: {e}")

    return wishlist


async def leave_collaboration(
    wishlist_service: WishlistService,
    notification_service: NotificationService,
    db,
    user_id: str,
    wishlist_id: str,
    collaborator_id: str,
) -> Dict[str, Any]:
    """
    Remove a collaborator from a wishlist.

    When a collaborator leaves on their own, the primary owner is notified.
    """
    wishlist = await wishlist_service.remove_collaborator(wishlist_id, user_id, collaborator_id)

    if user_id == collaborator_id:
        try:
            leaver_name = await _display_name(db, collaborator_id, "A collaborator")
            await notification_service.create_notification(
                user_id=wishlist["ownerId"],
                notification_type=NotificationType.COLLABORATOR_LEFT.value,
                metadata={
                    "wishlist_id": wishlist["id"],
                    "wishlist_name": wishlist["name"],
                    "leaver_id": collaborator_id,
                    "leaver_name": leaver_name,
                },
            )
        except Exception as e:
            logger.warning(f"Failed to notify owner of wishlist {wishlist_id}: {e}")

    return wishlist


async def archive_wishlist(
    wishlist_service: WishlistService,
    notification_service: NotificationService,
    db,
    user_id: str,
    wishlist_id: str,
) -> Dict[str, Any]:
    """
    Archive a wishlist.

    1. Archive (primary owner only)
    2. Notify the collaborators
    3. Return the updated wishlist
    """
    # 1. Archive
    wishlist = await wishlist_service.archive_wishlist(wishlist_id, user_id)

    # 2. Notify collaborators
    if wishlist["collaborators"]:
        try:
            owner_name = await _display_name(db, user_id, "A friend")
            await notification_service.create_for_users(
                user_ids=wishlist["collaborators"],
                notification_type=NotificationType.WISHLIST_ARCHIVED.value,
                metadata={
                    "wishlist_id": wishlist["id"],
                    "wishlist_name": wishlist["name"],
                    "owner_id": user_id,
                    "owner_name": owner_name,
                },
            )
        except Exception as e:
            logger.warning(f"Failed to notify collaborators of archived wishlist {wishlist_id}: {e}")

    return wishlist
