"""
Wishlist services.

Handles wishlists, items, collaborators and privacy.
"""

from giftlist.services.wishlists.privacy import PrivacyMode, WishlistPolicy, can_view
from giftlist.services.wishlists.wishlist_service import WishlistService

__all__ = ["PrivacyMode", "WishlistPolicy", "can_view", "WishlistService"]
