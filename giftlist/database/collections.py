"""
Giftlist collection names.

Services look collections up by these names on the Motor database they
are given, and `ensure_indexes` creates the indexes the services rely on.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────
# Collection names
# ─────────────────────────────────────────────────────────────────

USERS = "users"
WISHLISTS = "wishlists"
WISHLIST_ITEMS = "wishlistitems"
OWNERSHIP_FLAGS = "ownershipflags"
FRIENDSHIPS = "friendships"
NOTIFICATIONS = "notifications"


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Create indexes used by the services.

    At most one flag exists per (itemId, claimantId), and at most one
    notification per (userId, dedupKey).
    """
    await db[OWNERSHIP_FLAGS].create_index(
        [("itemId", ASCENDING), ("claimantId", ASCENDING)],
        unique=True,
        name="item_claimant_unique",
    )
    await db[OWNERSHIP_FLAGS].create_index([("wishlistId", ASCENDING)])
    await db[OWNERSHIP_FLAGS].create_index([("claimantId", ASCENDING)])

    await db[WISHLIST_ITEMS].create_index([("wishlistId", ASCENDING)])
    await db[WISHLISTS].create_index([("userId", ASCENDING)])
    await db[WISHLISTS].create_index([("collaborators", ASCENDING)])

    await db[FRIENDSHIPS].create_index([("requesterId", ASCENDING), ("status", ASCENDING)])
    await db[FRIENDSHIPS].create_index([("addresseeId", ASCENDING), ("status", ASCENDING)])

    await db[NOTIFICATIONS].create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
    await db[NOTIFICATIONS].create_index(
        [("userId", ASCENDING), ("dedupKey", ASCENDING)],
        unique=True,
        partialFilterExpression={"dedupKey": {"$type": "string"}},
        name="user_dedup_unique",
    )

    logger.info("Giftlist indexes ensured")
