"""
Ownership flag (claim) service.

A friend claims an item to signal they will buy it. Owners and
collaborators of the wishlist must never learn who claimed what: every
query issued on their behalf returns an empty result without reading the
flags collection. The only owner-facing read is `owner_claim_status`,
whose return type has no room for an identity.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, ConfigDict

from common.utils.exceptions import ConflictException
from giftlist.database.collections import OWNERSHIP_FLAGS
from giftlist.database.ids import to_object_id, to_user_id
from giftlist.services.wishlists.wishlist_service import WishlistService

logger = logging.getLogger(__name__)


class OwnerClaimStatus(BaseModel):
    """Owner-facing claim aggregate for one item."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    itemId: str
    claimed: bool


class OwnershipFlagService:
    """
    Records and answers queries about ownership flags.
    """

    def __init__(self, db: AsyncIOMotorDatabase, wishlist_service: WishlistService):
        """
        Initialize OwnershipFlagService.

        Args:
            db: MongoDB database connection
            wishlist_service: For item lookups and the privacy gate
        """
        self._db = db
        self._wishlist_service = wishlist_service
        self._flags_collection = db[OWNERSHIP_FLAGS]

    async def flag(self, item_id: str, claimant_id: str) -> bool:
        """
        Claim an item.

        Idempotent: claiming an already-claimed item succeeds without
        creating a second record.

        Args:
            item_id: Item to claim
            claimant_id: Verified claimant id

        Returns:
            True if a new flag was created, False if it already existed

        Raises:
            NotFoundException: If the item or its wishlist does not exist
            ConflictException: If the claimant owns or co-owns the wishlist
            ForbiddenException: If the claimant cannot view the wishlist
        """
        item = await self._wishlist_service.get_item(item_id)
        wishlist = await self._wishlist_service.get_wishlist(str(item["wishlistId"]))

        policy = await self._wishlist_service.check_can_view(wishlist, claimant_id)
        if policy.is_owner(claimant_id):
            raise ConflictException(
                message="You cannot claim items on your own wishlist",
                code="SELF_CLAIM"
            )

        claimant_oid = to_user_id(claimant_id)
        result = await self._flags_collection.update_one(
            {"itemId": item["_id"], "claimantId": claimant_oid},
            {
                "$setOnInsert": {
                    "itemId": item["_id"],
                    "wishlistId": wishlist["_id"],
                    "claimantId": claimant_oid,
                    "createdAt": datetime.now(timezone.utc),
                }
            },
            upsert=True
        )

        created = result.upserted_id is not None
        if created:
            logger.info(f"Item {item_id} claimed by {claimant_id}")
        return created

    async def unflag(self, item_id: str, claimant_id: str) -> bool:
        """
        Remove the claimant's own flag on an item.

        Removing an absent flag is a successful no-op.

        Returns:
            True if a flag was removed

        Raises:
            NotFoundException: If the item does not exist
        """
        item = await self._wishlist_service.get_item(item_id)

        result = await self._flags_collection.delete_one({
            "itemId": item["_id"],
            "claimantId": to_user_id(claimant_id),
        })

        removed = result.deleted_count > 0
        if removed:
            logger.info(f"Item {item_id} unclaimed by {claimant_id}")
        return removed

    async def query_flags(self, item_id: str, requester_id: str) -> FrozenSet[str]:
        """
        Get the ids of users who claimed an item.

        Owners and collaborators always receive an empty set. Other
        requesters must be able to view the wishlist.

        Raises:
            NotFoundException: If the item does not exist
            ForbiddenException: If the requester cannot view the wishlist
        """
        item = await self._wishlist_service.get_item(item_id)
        wishlist = await self._wishlist_service.get_wishlist(str(item["wishlistId"]))

        policy = await self._wishlist_service.check_can_view(wishlist, requester_id)
        if policy.is_owner(requester_id):
            return frozenset()

        cursor = self._flags_collection.find(
            {"itemId": item["_id"]},
            {"claimantId": 1}
        )
        flags = await cursor.to_list(length=None)
        return frozenset(str(f["claimantId"]) for f in flags)

    async def query_wishlist_flags(
        self,
        wishlist_id: str,
        requester_id: str,
    ) -> Dict[str, FrozenSet[str]]:
        """
        Get claimant ids for every claimed item of a wishlist.

        Same masking as `query_flags`: owners and collaborators get an
        empty mapping.

        Returns:
            Mapping of item id to claimant ids, only for claimed items
        """
        wishlist = await self._wishlist_service.get_wishlist(wishlist_id)

        policy = await self._wishlist_service.check_can_view(wishlist, requester_id)
        if policy.is_owner(requester_id):
            return {}

        cursor = self._flags_collection.find(
            {"wishlistId": wishlist["_id"]},
            {"itemId": 1, "claimantId": 1}
        )
        flags = await cursor.to_list(length=None)

        claimed: Dict[str, set] = {}
        for f in flags:
            claimed.setdefault(str(f["itemId"]), set()).add(str(f["claimantId"]))

        return {item: frozenset(ids) for item, ids in claimed.items()}

    async def owner_claim_status(self, item_id: str) -> OwnerClaimStatus:
        """
        Whether anyone has claimed an item, without saying who.

        Raises:
            NotFoundException: If the item does not exist
        """
        item = await self._wishlist_service.get_item(item_id)
        claimed = await self._is_flagged_by_anyone(item["_id"])
        return OwnerClaimStatus(itemId=str(item["_id"]), claimed=claimed)

    async def _is_flagged_by_anyone(self, item_oid: ObjectId) -> bool:
        count = await self._flags_collection.count_documents(
            {"itemId": item_oid},
            limit=1
        )
        return count > 0

    async def get_claims_for_user(self, claimant_id: str) -> List[Dict[str, Any]]:
        """
        Get a claimant's own claims, newest first.

        Returns:
            List of {itemId, wishlistId, claimedAt}
        """
        claimant_oid = to_user_id(claimant_id)
        cursor = self._flags_collection.find(
            {"claimantId": claimant_oid}
        ).sort("createdAt", -1)
        flags = await cursor.to_list(length=None)

        return [
            {
                "itemId": str(f["itemId"]),
                "wishlistId": str(f["wishlistId"]),
                "claimedAt": f["createdAt"].isoformat() if f.get("createdAt") else None,
            }
            for f in flags
        ]
