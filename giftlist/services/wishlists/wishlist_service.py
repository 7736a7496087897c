"""
Wishlist management service.

Handles wishlist creation, privacy settings, collaborators and items.
Every read on behalf of a viewer goes through `check_can_view` before any
item data is fetched.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from giftlist.database.collections import WISHLISTS, WISHLIST_ITEMS
from giftlist.database.ids import to_object_id, to_user_id
from giftlist.services.friends.friend_service import FriendService
from giftlist.services.wishlists.privacy import (
    PrivacyMode,
    WishlistPolicy,
    can_view,
    normalize_privacy,
)

logger = logging.getLogger(__name__)


class WishlistService:
    """
    Manages wishlists, their items and who may see them.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        friend_service: FriendService,
        max_collaborators: int = 10,
    ):
        """
        Initialize WishlistService.

        Args:
            db: MongoDB database connection
            friend_service: For friend graph lookups
            max_collaborators: Maximum collaborators per joint wishlist
        """
        self._db = db
        self._friend_service = friend_service
        self._max_collaborators = max_collaborators
        self._wishlists_collection = db[WISHLISTS]
        self._items_collection = db[WISHLIST_ITEMS]

    # ─────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────

    async def get_wishlist(self, wishlist_id: str) -> Dict[str, Any]:
        """
        Get a wishlist document by id.

        Raises:
            NotFoundException: If the wishlist does not exist
        """
        oid = to_object_id(wishlist_id, "Wishlist not found", "WISHLIST_NOT_FOUND")
        wishlist = await self._wishlists_collection.find_one({"_id": oid})

        if not wishlist:
            raise NotFoundException(
                message="Wishlist not found",
                code="WISHLIST_NOT_FOUND"
            )

        return wishlist

    async def get_item(self, item_id: str) -> Dict[str, Any]:
        """
        Get an item document by id.

        Raises:
            NotFoundException: If the item does not exist
        """
        oid = to_object_id(item_id, "Item not found", "ITEM_NOT_FOUND")
        item = await self._items_collection.find_one({"_id": oid})

        if not item:
            raise NotFoundException(
                message="Item not found",
                code="ITEM_NOT_FOUND"
            )

        return item

    async def get_policy(self, wishlist_id: str) -> WishlistPolicy:
        """Load the visibility policy of a wishlist."""
        wishlist = await self.get_wishlist(wishlist_id)
        return WishlistPolicy.from_document(wishlist)

    async def check_can_view(
        self,
        wishlist: Dict[str, Any],
        viewer_id: Optional[str],
    ) -> WishlistPolicy:
        """
        Gate a viewer on a wishlist.

        Args:
            wishlist: Wishlist document
            viewer_id: Verified viewer id, or None

        Returns:
            The wishlist's policy, for callers that need owner checks

        Raises:
            ForbiddenException: If the viewer may not see the wishlist
        """
        policy = WishlistPolicy.from_document(wishlist)

        friend_ids = set()
        needs_friends = (
            viewer_id
            and not policy.is_owner(viewer_id)
            and policy.privacy is not PrivacyMode.PRIVATE
        )
        if needs_friends:
            friend_ids = await self._friend_service.get_friend_ids(policy.owner_id)

        if not can_view(viewer_id, policy, friend_ids):
            logger.info(f"Viewer {viewer_id} denied access to wishlist {wishlist['_id']}")
            raise ForbiddenException(
                message="You do not have access to this wishlist",
                code="WISHLIST_FORBIDDEN"
            )

        return policy

    # ─────────────────────────────────────────────────────────────
    # Viewer reads
    # ─────────────────────────────────────────────────────────────

    async def get_wishlist_for_viewer(
        self,
        wishlist_id: str,
        viewer_id: Optional[str],
    ) -> Dict[str, Any]:
        """Get a formatted wishlist after checking the viewer may see it."""
        wishlist = await self.get_wishlist(wishlist_id)
        policy = await self.check_can_view(wishlist, viewer_id)
        return self.format_wishlist(wishlist, is_owner=policy.is_owner(viewer_id))

    async def get_items_for_viewer(
        self,
        wishlist_id: str,
        viewer_id: Optional[str],
    ) -> List[Dict[str, Any]]:
        """
        Get items of a wishlist for a viewer.

        The privacy gate runs before the items collection is queried.
        """
        wishlist = await self.get_wishlist(wishlist_id)
        await self.check_can_view(wishlist, viewer_id)

        cursor = self._items_collection.find(
            {"wishlistId": wishlist["_id"]}
        ).sort("createdAt", 1)
        items = await cursor.to_list(length=None)

        return [self.format_item(item) for item in items]

    async def get_visible_wishlists(
        self,
        owner_id: str,
        viewer_id: str,
    ) -> List[Dict[str, Any]]:
        """
        Get the wishlists of `owner_id` that `viewer_id` may see.

        Archived wishlists are excluded.
        """
        owner_oid = to_user_id(owner_id)
        cursor = self._wishlists_collection.find({
            "userId": owner_oid,
            "isArchived": {"$ne": True},
        }).sort("createdAt", -1)
        wishlists = await cursor.to_list(length=None)

        if not wishlists:
            return []

        friend_ids = set()
        if viewer_id != owner_id:
            friend_ids = await self._friend_service.get_friend_ids(owner_id)

        visible = []
        for wishlist in wishlists:
            policy = WishlistPolicy.from_document(wishlist)
            if can_view(viewer_id, policy, friend_ids):
                visible.append(
                    self.format_wishlist(wishlist, is_owner=policy.is_owner(viewer_id))
                )

        return visible

    async def get_owned_wishlists(self, user_id: str) -> List[Dict[str, Any]]:
        """Get wishlists the user owns or collaborates on."""
        user_oid = to_user_id(user_id)
        cursor = self._wishlists_collection.find({
            "$or": [{"userId": user_oid}, {"collaborators": user_oid}]
        }).sort("createdAt", -1)
        wishlists = await cursor.to_list(length=None)
        return [self.format_wishlist(w, is_owner=True) for w in wishlists]

    # ─────────────────────────────────────────────────────────────
    # Owner writes
    # ─────────────────────────────────────────────────────────────

    async def create_wishlist(
        self,
        owner_id: str,
        name: str,
        privacy: str = PrivacyMode.FRIENDS.value,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a wishlist.

        Args:
            owner_id: Primary owner
            name: Wishlist name
            privacy: Requested privacy ("public" is stored as "friends")
            description: Optional description

        Returns:
            Formatted wishlist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationException(
                message="Wishlist name is required",
                code="WISHLIST_NAME_REQUIRED"
            )

        mode = self._normalize_privacy(privacy)
        now = datetime.now(timezone.utc)

        wishlist_doc = {
            "userId": to_user_id(owner_id),
            "name": name,
            "description": description,
            "privacy": mode.value,
            "collaborators": [],
            "selectedFriends": [],
            "isArchived": False,
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self._wishlists_collection.insert_one(wishlist_doc)
        wishlist_doc["_id"] = result.inserted_id

        logger.info(f"Created wishlist {result.inserted_id} for user {owner_id} ({mode.value})")
        return self.format_wishlist(wishlist_doc, is_owner=True)

    async def update_privacy(
        self,
        wishlist_id: str,
        user_id: str,
        privacy: str,
    ) -> Dict[str, Any]:
        """
        Change a wishlist's privacy. Primary owner only.

        Raises:
            ForbiddenException: If the user is not the primary owner
            ValidationException: If the privacy value is unknown
        """
        wishlist = await self.get_wishlist(wishlist_id)
        self._require_primary_owner(wishlist, user_id)

        mode = self._normalize_privacy(privacy)
        now = datetime.now(timezone.utc)

        await self._wishlists_collection.update_one(
            {"_id": wishlist["_id"]},
            {"$set": {"privacy": mode.value, "updatedAt": now}}
        )

        wishlist["privacy"] = mode.value
        wishlist["updatedAt"] = now

        logger.info(f"Wishlist {wishlist_id} privacy set to {mode.value}")
        return self.format_wishlist(wishlist, is_owner=True)

    async def set_selected_friends(
        self,
        wishlist_id: str,
        user_id: str,
        friend_ids: List[str],
    ) -> Dict[str, Any]:
        """
        Replace the selected-friends set of a wishlist.

        Raises:
            ForbiddenException: If the user is not the primary owner
            ValidationException: If privacy is not selected_friends, or an id
                is not a friend of the owner
        """
        wishlist = await self.get_wishlist(wishlist_id)
        self._require_primary_owner(wishlist, user_id)

        if wishlist.get("privacy") != PrivacyMode.SELECTED_FRIENDS.value:
            raise ValidationException(
                message="Wishlist privacy must be set to 'selected_friends'",
                code="PRIVACY_NOT_SELECTED_FRIENDS"
            )

        unique_ids = list(dict.fromkeys(friend_ids))
        if unique_ids:
            valid_ids = await self._friend_service.get_friend_ids(user_id)
            invalid = [f for f in unique_ids if f not in valid_ids]
            if invalid:
                raise ValidationException(
                    message="Some selected users are not your friends",
                    code="NOT_FRIENDS",
                    details={"userIds": invalid}
                )

        now = datetime.now(timezone.utc)
        selected = [ObjectId(f) for f in unique_ids]
        await self._wishlists_collection.update_one(
            {"_id": wishlist["_id"]},
            {"$set": {"selectedFriends": selected, "updatedAt": now}}
        )

        wishlist["selectedFriends"] = selected
        wishlist["updatedAt"] = now

        logger.info(f"Wishlist {wishlist_id} selected friends updated ({len(selected)})")
        return self.format_wishlist(wishlist, is_owner=True)

    async def archive_wishlist(self, wishlist_id: str, user_id: str) -> Dict[str, Any]:
        """
        Archive a wishlist. Primary owner only.

        Archived wishlists are hidden from friends' listings and accept no
        new collaborators.
        """
        return await self._set_archived(wishlist_id, user_id, True)

    async def unarchive_wishlist(self, wishlist_id: str, user_id: str) -> Dict[str, Any]:
        """Restore an archived wishlist. Primary owner only."""
        return await self._set_archived(wishlist_id, user_id, False)

    async def _set_archived(
        self,
        wishlist_id: str,
        user_id: str,
        archived: bool,
    ) -> Dict[str, Any]:
        wishlist = await self.get_wishlist(wishlist_id)
        self._require_primary_owner(wishlist, user_id)

        if bool(wishlist.get("isArchived")) == archived:
            raise ConflictException(
                message="Wishlist is already archived" if archived else "Wishlist is not archived",
                code="ALREADY_ARCHIVED" if archived else "NOT_ARCHIVED"
            )

        now = datetime.now(timezone.utc)
        await self._wishlists_collection.update_one(
            {"_id": wishlist["_id"]},
            {"$set": {"isArchived": archived, "updatedAt": now}}
        )

        wishlist["isArchived"] = archived
        wishlist["updatedAt"] = now

        logger.info(f"Wishlist {wishlist_id} {'archived' if archived else 'unarchived'}")
        return self.format_wishlist(wishlist, is_owner=True)

    async def add_item(
        self,
        wishlist_id: str,
        user_id: str,
        title: str,
        link: Optional[str] = None,
        price: Optional[float] = None,
        currency: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Add an item to a wishlist. Owner or collaborator only.
        """
        wishlist = await self.get_wishlist(wishlist_id)
        policy = WishlistPolicy.from_document(wishlist)

        if not policy.is_owner(user_id):
            raise ForbiddenException(
                message="Only owners can add items to this wishlist",
                code="NOT_WISHLIST_OWNER"
            )

        title = (title or "").strip()
        if not title:
            raise ValidationException(
                message="Item title is required",
                code="ITEM_TITLE_REQUIRED"
            )

        item_doc = {
            "wishlistId": wishlist["_id"],
            "title": title,
            "link": link,
            "price": price,
            "currency": currency,
            "notes": notes,
            "createdBy": to_user_id(user_id),
            "createdAt": datetime.now(timezone.utc),
        }

        result = await self._items_collection.insert_one(item_doc)
        item_doc["_id"] = result.inserted_id

        logger.info(f"Added item {result.inserted_id} to wishlist {wishlist_id}")
        return self.format_item(item_doc)

    async def add_collaborator(
        self,
        wishlist_id: str,
        user_id: str,
        friend_id: str,
    ) -> Dict[str, Any]:
        """
        Add a collaborator to a wishlist, making it a joint wishlist.

        Raises:
            ForbiddenException: If the user is not the primary owner
            ValidationException: Self-add, non-friend, archived or limit reached
            ConflictException: If the friend is already a collaborator
        """
        wishlist = await self.get_wishlist(wishlist_id)
        self._require_primary_owner(wishlist, user_id)

        if wishlist.get("isArchived"):
            raise ValidationException(
                message="Cannot add collaborators to archived wishlist",
                code="WISHLIST_ARCHIVED"
            )

        if friend_id == user_id:
            raise ValidationException(
                message="Cannot add yourself as a collaborator",
                code="SELF_COLLABORATOR"
            )

        collaborators = [str(c) for c in wishlist.get("collaborators") or []]
        if friend_id in collaborators:
            raise ConflictException(
                message="This friend is already a collaborator",
                code="ALREADY_COLLABORATOR"
            )

        if len(collaborators) >= self._max_collaborators:
            raise ValidationException(
                message=f"Cannot add more than {self._max_collaborators} collaborators",
                code="COLLABORATOR_LIMIT"
            )

        if not await self._friend_service.are_friends(user_id, friend_id):
            raise ValidationException(
                message="Can only add friends as collaborators",
                code="NOT_FRIENDS"
            )

        now = datetime.now(timezone.utc)
        await self._wishlists_collection.update_one(
            {"_id": wishlist["_id"]},
            {
                "$addToSet": {"collaborators": ObjectId(friend_id)},
                "$set": {"updatedAt": now}
            }
        )

        wishlist["collaborators"] = list(wishlist.get("collaborators") or []) + [ObjectId(friend_id)]
        wishlist["updatedAt"] = now

        logger.info(f"Added collaborator {friend_id} to wishlist {wishlist_id}")
        return self.format_wishlist(wishlist, is_owner=True)

    async def remove_collaborator(
        self,
        wishlist_id: str,
        user_id: str,
        collaborator_id: str,
    ) -> Dict[str, Any]:
        """
        Remove a collaborator. Allowed for the primary owner, or for the
        collaborator leaving on their own.
        """
        wishlist = await self.get_wishlist(wishlist_id)
        owner_id = str(wishlist["userId"])

        if user_id != owner_id and user_id != collaborator_id:
            raise ForbiddenException(
                message="Not authorized to remove this collaborator",
                code="NOT_WISHLIST_OWNER"
            )

        if collaborator_id == owner_id:
            raise ValidationException(
                message="Primary owner cannot leave the wishlist",
                code="PRIMARY_OWNER_CANNOT_LEAVE"
            )

        # Collaborators may still leave an archived wishlist
        if wishlist.get("isArchived") and user_id != collaborator_id:
            raise ValidationException(
                message="Cannot remove collaborators from archived wishlist",
                code="WISHLIST_ARCHIVED"
            )

        collaborators = [str(c) for c in wishlist.get("collaborators") or []]
        if collaborator_id not in collaborators:
            raise NotFoundException(
                message="User is not a collaborator on this wishlist",
                code="COLLABORATOR_NOT_FOUND"
            )

        now = datetime.now(timezone.utc)
        await self._wishlists_collection.update_one(
            {"_id": wishlist["_id"]},
            {
                "$pull": {"collaborators": ObjectId(collaborator_id)},
                "$set": {"updatedAt": now}
            }
        )

        wishlist["collaborators"] = [
            c for c in wishlist.get("collaborators") or [] if str(c) != collaborator_id
        ]
        wishlist["updatedAt"] = now

        logger.info(f"Removed collaborator {collaborator_id} from wishlist {wishlist_id}")
        return self.format_wishlist(wishlist, is_owner=user_id == owner_id)

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _require_primary_owner(self, wishlist: Dict[str, Any], user_id: str) -> None:
        if str(wishlist["userId"]) != user_id:
            raise ForbiddenException(
                message="Only the primary owner can change this wishlist",
                code="NOT_PRIMARY_OWNER"
            )

    def _normalize_privacy(self, privacy: str) -> PrivacyMode:
        try:
            return normalize_privacy(privacy)
        except ValueError as e:
            raise ValidationException(message=str(e), code="INVALID_PRIVACY")

    @staticmethod
    def format_wishlist(wishlist: Dict[str, Any], is_owner: bool = False) -> Dict[str, Any]:
        """Format a wishlist document for API responses."""
        policy = WishlistPolicy.from_document(wishlist)
        formatted = {
            "id": str(wishlist["_id"]),
            "ownerId": policy.owner_id,
            "name": wishlist.get("name", ""),
            "description": wishlist.get("description"),
            "privacy": policy.privacy.value,
            "collaborators": [str(c) for c in wishlist.get("collaborators") or []],
            "isJoint": bool(policy.collaborator_ids),
            "isArchived": wishlist.get("isArchived", False),
            "isOwner": is_owner,
            "createdAt": wishlist["createdAt"].isoformat() if wishlist.get("createdAt") else None,
        }
        if is_owner:
            formatted["selectedFriends"] = sorted(policy.selected_friend_ids)
        return formatted

    @staticmethod
    def format_item(item: Dict[str, Any]) -> Dict[str, Any]:
        """Format an item document for API responses."""
        return {
            "id": str(item["_id"]),
            "wishlistId": str(item["wishlistId"]),
            "title": item.get("title", ""),
            "link": item.get("link"),
            "price": item.get("price"),
            "currency": item.get("currency"),
            "notes": item.get("notes"),
            "createdAt": item["createdAt"].isoformat() if item.get("createdAt") else None,
        }
