"""
Claim services.

Handles ownership flags on wishlist items.
"""

from giftlist.services.claims.ownership_flag_service import OwnershipFlagService, OwnerClaimStatus

__all__ = ["OwnershipFlagService", "OwnerClaimStatus"]
