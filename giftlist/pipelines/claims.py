"""
Claim pipeline functions.

Orchestrates claiming and unclaiming items, including the owner-facing
claim notification. That notification names the item, never the claimant.
"""

import logging
from typing import Dict, Any

from giftlist.notifications.types import NotificationType
from giftlist.services.claims.ownership_flag_service import OwnershipFlagService
from giftlist.services.notifications.notification_service import NotificationService
from giftlist.services.wishlists.privacy import WishlistPolicy
from giftlist.services.wishlists.wishlist_service import WishlistService

logger = logging.getLogger(__name__)


async def claim_item(
    flag_service: OwnershipFlagService,
    wishlist_service: WishlistService,
    notification_service: NotificationService,
    user_id: str,
    item_id: str,
) -> Dict[str, Any]:
    """
    Claim an item for the current user.

    1. Record the flag (validates visibility and self-claim)
    2. If the flag is new, notify the wishlist's owners (once per item)
    3. Return the claim result
    """
    # 1. Record flag
    created = await flag_service.flag(item_id, user_id)

    # 2. Notify owners on first claim only
    if created:
        try:
            item = await wishlist_service.get_item(item_id)
            wishlist = await wishlist_service.get_wishlist(str(item["wishlistId"]))
            policy = WishlistPolicy.from_document(wishlist)

            await notification_service.create_for_users(
                user_ids=sorted(policy.owner_ids),
                notification_type=NotificationType.OWNERSHIP_FLAG.value,
                metadata={
                    "item_id": str(item["_id"]),
                    "item_title": item.get("title", ""),
                    "wishlist_id": str(wishlist["_id"]),
                    "wishlist_name": wishlist.get("name", ""),
                },
                dedup_key=f"ownership_flag:{item['_id']}",
            )
        except Exception as e:
            logger.warning(f"Failed to notify owners of claim on item {item_id}: {e}")

    # 3. Result
    return {
        "itemId": item_id,
        "claimed": True,
        "created": created,
    }


async def unclaim_item(
    flag_service: OwnershipFlagService,
    user_id: str,
    item_id: str,
) -> Dict[str, Any]:
    """Remove the current user's claim on an item. Owners are not notified."""
    removed = await flag_service.unflag(item_id, user_id)
    return {
        "itemId": item_id,
        "claimed": False,
        "removed": removed,
    }
