"""
Giftlist Pipelines.

Business logic orchestration functions.
"""

from giftlist.pipelines.claims import claim_item, unclaim_item
from giftlist.pipelines.wishlists import (
    add_collaborator,
    archive_wishlist,
    leave_collaboration,
)

__all__ = [
    "claim_item",
    "unclaim_item",
    "add_collaborator",
    "archive_wishlist",
    "leave_collaboration",
]
