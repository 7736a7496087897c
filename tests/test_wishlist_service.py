"""Unit tests for WishlistService."""

import pytest
from unittest.mock import MagicMock
from bson import ObjectId

from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from giftlist.database.collections import WISHLISTS, WISHLIST_ITEMS
from giftlist.services.wishlists.wishlist_service import WishlistService


@pytest.fixture
def service(mock_db, mock_friend_service):
    return WishlistService(mock_db, friend_service=mock_friend_service, max_collaborators=2)


# ─────────────────────────────────────────────────────────────────
# create_wishlist
# ─────────────────────────────────────────────────────────────────


class TestCreateWishlist:
    @pytest.mark.asyncio
    async def test_public_is_stored_as_friends(self, service, collections, owner_id):
        collections[WISHLISTS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        wishlist = await service.create_wishlist(owner_id, "Xmas", privacy="public")

        inserted = collections[WISHLISTS].insert_one.call_args[0][0]
        assert inserted["privacy"] == "friends"
        assert inserted["userId"] == ObjectId(owner_id)
        assert inserted["collaborators"] == []
        assert wishlist["privacy"] == "friends"
        assert wishlist["isOwner"] is True

    @pytest.mark.asyncio
    async def test_invalid_privacy_rejected(self, service, collections, owner_id):
        with pytest.raises(ValidationException) as exc_info:
            await service.create_wishlist(owner_id, "Xmas", privacy="everyone")

        assert exc_info.value.code == "INVALID_PRIVACY"
        collections[WISHLISTS].insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, service, owner_id):
        with pytest.raises(ValidationException):
            await service.create_wishlist(owner_id, "   ")


# ─────────────────────────────────────────────────────────────────
# Viewer reads
# ─────────────────────────────────────────────────────────────────


class TestViewerReads:
    @pytest.mark.asyncio
    async def test_missing_wishlist(self, service, collections, friend_id):
        collections[WISHLISTS].find_one.return_value = None

        with pytest.raises(NotFoundException):
            await service.get_wishlist_for_viewer(str(ObjectId()), friend_id)

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, service, collections, friend_id):
        with pytest.raises(NotFoundException):
            await service.get_wishlist("not-an-id")

        collections[WISHLISTS].find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_friend_sees_items(
        self, service, wishlist_lookup, make_cursor, sample_wishlist_doc, sample_item_doc, friend_id,
    ):
        wishlist_lookup[WISHLIST_ITEMS].find.return_value = make_cursor([sample_item_doc])

        items = await service.get_items_for_viewer(str(sample_wishlist_doc["_id"]), friend_id)

        assert [i["title"] for i in items] == ["Espresso machine"]

    @pytest.mark.asyncio
    async def test_stranger_denied_before_items_fetched(
        self, service, wishlist_lookup, sample_wishlist_doc, stranger_id,
    ):
        with pytest.raises(ForbiddenException):
            await service.get_items_for_viewer(str(sample_wishlist_doc["_id"]), stranger_id)

        wishlist_lookup[WISHLIST_ITEMS].find.assert_not_called()

    @pytest.mark.asyncio
    async def test_anonymous_denied(self, service, wishlist_lookup, sample_wishlist_doc):
        with pytest.raises(ForbiddenException):
            await service.get_wishlist_for_viewer(str(sample_wishlist_doc["_id"]), None)

    @pytest.mark.asyncio
    async def test_owner_skips_friend_lookup(
        self, service, wishlist_lookup, mock_friend_service, sample_wishlist_doc, owner_id,
    ):
        sample_wishlist_doc["privacy"] = "private"

        wishlist = await service.get_wishlist_for_viewer(str(sample_wishlist_doc["_id"]), owner_id)

        assert wishlist["isOwner"] is True
        mock_friend_service.get_friend_ids.assert_not_called()

    @pytest.mark.asyncio
    async def test_selected_friends_only_reach_selected(
        self, service, wishlist_lookup, sample_wishlist_doc, friend_id, other_friend_id,
    ):
        sample_wishlist_doc["privacy"] = "selected_friends"
        sample_wishlist_doc["selectedFriends"] = [ObjectId(friend_id)]
        wishlist_id = str(sample_wishlist_doc["_id"])

        visible = await service.get_wishlist_for_viewer(wishlist_id, friend_id)
        assert visible["isOwner"] is False
        assert "selectedFriends" not in visible

        with pytest.raises(ForbiddenException):
            await service.get_wishlist_for_viewer(wishlist_id, other_friend_id)

    @pytest.mark.asyncio
    async def test_visible_wishlists_filters_by_privacy(
        self, service, collections, make_cursor, owner_id, friend_id,
    ):
        docs = [
            {"_id": ObjectId(), "userId": ObjectId(owner_id), "name": "Open", "privacy": "friends"},
            {"_id": ObjectId(), "userId": ObjectId(owner_id), "name": "Secret", "privacy": "private"},
            {"_id": ObjectId(), "userId": ObjectId(owner_id), "name": "Old", "privacy": "public"},
        ]
        collections[WISHLISTS].find.return_value = make_cursor(docs)

        visible = await service.get_visible_wishlists(owner_id, friend_id)

        assert [w["name"] for w in visible] == ["Open", "Old"]
        assert all(w["privacy"] == "friends" for w in visible)
        query = collections[WISHLISTS].find.call_args[0][0]
        assert query["isArchived"] == {"$ne": True}

    @pytest.mark.asyncio
    async def test_owned_wishlists_malformed_user_id(self, service, collections):
        with pytest.raises(NotFoundException) as exc_info:
            await service.get_owned_wishlists("not-an-object-id")

        assert exc_info.value.code == "USER_NOT_FOUND"
        collections[WISHLISTS].find.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_policy(self, service, wishlist_lookup, sample_wishlist_doc, owner_id, collaborator_id):
        policy = await service.get_policy(str(sample_wishlist_doc["_id"]))

        assert policy.owner_id == owner_id
        assert policy.is_owner(collaborator_id)


# ─────────────────────────────────────────────────────────────────
# Privacy updates
# ─────────────────────────────────────────────────────────────────


class TestUpdatePrivacy:
    @pytest.mark.asyncio
    async def test_primary_owner_updates(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        wishlist = await service.update_privacy(str(sample_wishlist_doc["_id"]), owner_id, "private")

        update = wishlist_lookup[WISHLISTS].update_one.call_args[0][1]
        assert update["$set"]["privacy"] == "private"
        assert wishlist["privacy"] == "private"

    @pytest.mark.asyncio
    async def test_collaborator_cannot_update(
        self, service, wishlist_lookup, sample_wishlist_doc, collaborator_id,
    ):
        with pytest.raises(ForbiddenException):
            await service.update_privacy(str(sample_wishlist_doc["_id"]), collaborator_id, "private")

        wishlist_lookup[WISHLISTS].update_one.assert_not_called()


class TestSetSelectedFriends:
    @pytest.mark.asyncio
    async def test_requires_selected_friends_privacy(
        self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id,
    ):
        with pytest.raises(ValidationException) as exc_info:
            await service.set_selected_friends(str(sample_wishlist_doc["_id"]), owner_id, [friend_id])

        assert exc_info.value.code == "PRIVACY_NOT_SELECTED_FRIENDS"

    @pytest.mark.asyncio
    async def test_rejects_non_friends(
        self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id, stranger_id,
    ):
        sample_wishlist_doc["privacy"] = "selected_friends"

        with pytest.raises(ValidationException) as exc_info:
            await service.set_selected_friends(
                str(sample_wishlist_doc["_id"]), owner_id, [friend_id, stranger_id]
            )

        assert exc_info.value.code == "NOT_FRIENDS"
        wishlist_lookup[WISHLISTS].update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_replaces_whole_set(
        self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id,
    ):
        sample_wishlist_doc["privacy"] = "selected_friends"
        sample_wishlist_doc["selectedFriends"] = [ObjectId()]

        wishlist = await service.set_selected_friends(
            str(sample_wishlist_doc["_id"]), owner_id, [friend_id, friend_id]
        )

        update = wishlist_lookup[WISHLISTS].update_one.call_args[0][1]
        assert update["$set"]["selectedFriends"] == [ObjectId(friend_id)]
        assert wishlist["selectedFriends"] == [friend_id]


# ─────────────────────────────────────────────────────────────────
# Items
# ─────────────────────────────────────────────────────────────────


class TestAddItem:
    @pytest.mark.asyncio
    async def test_collaborator_can_add(
        self, service, wishlist_lookup, sample_wishlist_doc, collaborator_id,
    ):
        wishlist_lookup[WISHLIST_ITEMS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        item = await service.add_item(str(sample_wishlist_doc["_id"]), collaborator_id, "Book")

        assert item["title"] == "Book"
        inserted = wishlist_lookup[WISHLIST_ITEMS].insert_one.call_args[0][0]
        assert inserted["wishlistId"] == sample_wishlist_doc["_id"]

    @pytest.mark.asyncio
    async def test_friend_cannot_add(self, service, wishlist_lookup, sample_wishlist_doc, friend_id):
        with pytest.raises(ForbiddenException):
            await service.add_item(str(sample_wishlist_doc["_id"]), friend_id, "Book")


# ─────────────────────────────────────────────────────────────────
# Collaborators
# ─────────────────────────────────────────────────────────────────


class TestAddCollaborator:
    @pytest.mark.asyncio
    async def test_adds_friend(self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id):
        wishlist = await service.add_collaborator(str(sample_wishlist_doc["_id"]), owner_id, friend_id)

        update = wishlist_lookup[WISHLISTS].update_one.call_args[0][1]
        assert update["$addToSet"] == {"collaborators": ObjectId(friend_id)}
        assert friend_id in wishlist["collaborators"]
        assert wishlist["isJoint"] is True

    @pytest.mark.asyncio
    async def test_only_primary_owner(
        self, service, wishlist_lookup, sample_wishlist_doc, collaborator_id, friend_id,
    ):
        with pytest.raises(ForbiddenException):
            await service.add_collaborator(str(sample_wishlist_doc["_id"]), collaborator_id, friend_id)

    @pytest.mark.asyncio
    async def test_not_self(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        with pytest.raises(ValidationException) as exc_info:
            await service.add_collaborator(str(sample_wishlist_doc["_id"]), owner_id, owner_id)
        assert exc_info.value.code == "SELF_COLLABORATOR"

    @pytest.mark.asyncio
    async def test_not_duplicate(
        self, service, wishlist_lookup, sample_wishlist_doc, owner_id, collaborator_id,
    ):
        with pytest.raises(ConflictException):
            await service.add_collaborator(str(sample_wishlist_doc["_id"]), owner_id, collaborator_id)

    @pytest.mark.asyncio
    async def test_friends_only(
        self, service, wishlist_lookup, mock_friend_service, sample_wishlist_doc, owner_id, stranger_id,
    ):
        mock_friend_service.are_friends.return_value = False

        with pytest.raises(ValidationException) as exc_info:
            await service.add_collaborator(str(sample_wishlist_doc["_id"]), owner_id, stranger_id)

        assert exc_info.value.code == "NOT_FRIENDS"
        wishlist_lookup[WISHLISTS].update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_limit(self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id):
        sample_wishlist_doc["collaborators"].append(ObjectId())

        with pytest.raises(ValidationException) as exc_info:
            await service.add_collaborator(str(sample_wishlist_doc["_id"]), owner_id, friend_id)

        assert exc_info.value.code == "COLLABORATOR_LIMIT"


class TestRemoveCollaborator:
    @pytest.mark.asyncio
    async def test_collaborator_can_leave(
        self, service, wishlist_lookup, sample_wishlist_doc, collaborator_id,
    ):
        wishlist = await service.remove_collaborator(
            str(sample_wishlist_doc["_id"]), collaborator_id, collaborator_id
        )

        update = wishlist_lookup[WISHLISTS].update_one.call_args[0][1]
        assert update["$pull"] == {"collaborators": ObjectId(collaborator_id)}
        assert wishlist["collaborators"] == []

    @pytest.mark.asyncio
    async def test_primary_owner_cannot_leave(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        with pytest.raises(ValidationException):
            await service.remove_collaborator(str(sample_wishlist_doc["_id"]), owner_id, owner_id)

    @pytest.mark.asyncio
    async def test_friend_cannot_remove_others(
        self, service, wishlist_lookup, sample_wishlist_doc, friend_id, collaborator_id,
    ):
        with pytest.raises(ForbiddenException):
            await service.remove_collaborator(str(sample_wishlist_doc["_id"]), friend_id, collaborator_id)

    @pytest.mark.asyncio
    async def test_unknown_collaborator(self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id):
        with pytest.raises(NotFoundException):
            await service.remove_collaborator(str(sample_wishlist_doc["_id"]), owner_id, friend_id)

    @pytest.mark.asyncio
    async def test_owner_cannot_remove_from_archived(
        self, service, wishlist_lookup, sample_wishlist_doc, owner_id, collaborator_id,
    ):
        sample_wishlist_doc["isArchived"] = True

        with pytest.raises(ValidationException) as exc_info:
            await service.remove_collaborator(str(sample_wishlist_doc["_id"]), owner_id, collaborator_id)

        assert exc_info.value.code == "WISHLIST_ARCHIVED"
        wishlist_lookup[WISHLISTS].update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_collaborator_can_leave_archived(
        self, service, wishlist_lookup, sample_wishlist_doc, collaborator_id,
    ):
        sample_wishlist_doc["isArchived"] = True

        wishlist = await service.remove_collaborator(
            str(sample_wishlist_doc["_id"]), collaborator_id, collaborator_id
        )

        assert wishlist["collaborators"] == []


# ─────────────────────────────────────────────────────────────────
# Archiving
# ─────────────────────────────────────────────────────────────────


class TestArchive:
    @pytest.mark.asyncio
    async def test_owner_archives(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        wishlist = await service.archive_wishlist(str(sample_wishlist_doc["_id"]), owner_id)

        update = wishlist_lookup[WISHLISTS].update_one.call_args[0][1]
        assert update["$set"]["isArchived"] is True
        assert wishlist["isArchived"] is True

    @pytest.mark.asyncio
    async def test_collaborator_cannot_archive(
        self, service, wishlist_lookup, sample_wishlist_doc, collaborator_id,
    ):
        with pytest.raises(ForbiddenException) as exc_info:
            await service.archive_wishlist(str(sample_wishlist_doc["_id"]), collaborator_id)

        assert exc_info.value.code == "NOT_PRIMARY_OWNER"
        wishlist_lookup[WISHLISTS].update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_archiving_twice_conflicts(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        sample_wishlist_doc["isArchived"] = True

        with pytest.raises(ConflictException) as exc_info:
            await service.archive_wishlist(str(sample_wishlist_doc["_id"]), owner_id)

        assert exc_info.value.code == "ALREADY_ARCHIVED"

    @pytest.mark.asyncio
    async def test_owner_unarchives(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        sample_wishlist_doc["isArchived"] = True

        wishlist = await service.unarchive_wishlist(str(sample_wishlist_doc["_id"]), owner_id)

        update = wishlist_lookup[WISHLISTS].update_one.call_args[0][1]
        assert update["$set"]["isArchived"] is False
        assert wishlist["isArchived"] is False

    @pytest.mark.asyncio
    async def test_unarchiving_active_conflicts(self, service, wishlist_lookup, sample_wishlist_doc, owner_id):
        with pytest.raises(ConflictException) as exc_info:
            await service.unarchive_wishlist(str(sample_wishlist_doc["_id"]), owner_id)

        assert exc_info.value.code == "NOT_ARCHIVED"

    @pytest.mark.asyncio
    async def test_archived_wishlist_rejects_collaborators(
        self, service, wishlist_lookup, sample_wishlist_doc, owner_id, friend_id,
    ):
        sample_wishlist_doc["isArchived"] = True

        with pytest.raises(ValidationException) as exc_info:
            await service.add_collaborator(str(sample_wishlist_doc["_id"]), owner_id, friend_id)

        assert exc_info.value.code == "WISHLIST_ARCHIVED"
