"""
Giftlist collection names and index setup.
"""

from giftlist.database.collections import (
    USERS,
    WISHLISTS,
    WISHLIST_ITEMS,
    OWNERSHIP_FLAGS,
    FRIENDSHIPS,
    NOTIFICATIONS,
    ensure_indexes,
)
from giftlist.database.ids import to_object_id, to_user_id

__all__ = [
    "USERS",
    "WISHLISTS",
    "WISHLIST_ITEMS",
    "OWNERSHIP_FLAGS",
    "FRIENDSHIPS",
    "NOTIFICATIONS",
    "ensure_indexes",
    "to_object_id",
    "to_user_id",
]
