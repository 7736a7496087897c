"""
Giftlist API Routers.

All routers are imported here for easy access.
"""

from giftlist.routers.wishlists import router as wishlists_router
from giftlist.routers.claims import router as claims_router
from giftlist.routers.notifications import router as notifications_router

__all__ = [
    "wishlists_router",
    "claims_router",
    "notifications_router",
]
