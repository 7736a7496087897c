"""Unit tests for OwnershipFlagService (claim masking)."""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from bson import ObjectId

from common.utils.exceptions import ConflictException, ForbiddenException, NotFoundException
from giftlist.database.collections import OWNERSHIP_FLAGS, WISHLIST_ITEMS
from giftlist.services.claims.ownership_flag_service import OwnershipFlagService, OwnerClaimStatus
from giftlist.services.wishlists.wishlist_service import WishlistService


@pytest.fixture
def flags(collections):
    return collections[OWNERSHIP_FLAGS]


@pytest.fixture
def service(mock_db, mock_friend_service):
    wishlist_service = WishlistService(mock_db, friend_service=mock_friend_service)
    return OwnershipFlagService(mock_db, wishlist_service=wishlist_service)


@pytest.fixture
def item_id(sample_item_doc):
    return str(sample_item_doc["_id"])


# ─────────────────────────────────────────────────────────────────
# flag
# ─────────────────────────────────────────────────────────────────


class TestFlag:
    @pytest.mark.asyncio
    async def test_friend_creates_flag(self, service, wishlist_lookup, flags, item_id, friend_id, sample_wishlist_doc):
        flags.update_one.return_value = MagicMock(upserted_id=ObjectId())

        created = await service.flag(item_id, friend_id)

        assert created is True
        filter_, update = flags.update_one.call_args[0]
        assert filter_ == {"itemId": ObjectId(item_id), "claimantId": ObjectId(friend_id)}
        assert update["$setOnInsert"]["wishlistId"] == sample_wishlist_doc["_id"]
        assert flags.update_one.call_args[1]["upsert"] is True

    @pytest.mark.asyncio
    async def test_second_flag_is_noop(self, service, wishlist_lookup, flags, item_id, friend_id):
        flags.update_one.return_value = MagicMock(upserted_id=None)

        assert await service.flag(item_id, friend_id) is False

    @pytest.mark.asyncio
    async def test_owner_cannot_flag(self, service, wishlist_lookup, flags, item_id, owner_id):
        with pytest.raises(ConflictException) as exc_info:
            await service.flag(item_id, owner_id)

        assert exc_info.value.code == "SELF_CLAIM"
        flags.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_collaborator_cannot_flag(self, service, wishlist_lookup, flags, item_id, collaborator_id):
        with pytest.raises(ConflictException):
            await service.flag(item_id, collaborator_id)

        flags.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_viewer_without_access_cannot_flag(self, service, wishlist_lookup, flags, item_id, stranger_id):
        with pytest.raises(ForbiddenException):
            await service.flag(item_id, stranger_id)

        flags.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_item(self, service, collections, flags, friend_id):
        collections[WISHLIST_ITEMS].find_one.return_value = None

        with pytest.raises(NotFoundException):
            await service.flag(str(ObjectId()), friend_id)

        flags.update_one.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# unflag
# ─────────────────────────────────────────────────────────────────


class TestUnflag:
    @pytest.mark.asyncio
    async def test_removes_own_flag(self, service, wishlist_lookup, flags, item_id, friend_id):
        flags.delete_one.return_value = MagicMock(deleted_count=1)

        assert await service.unflag(item_id, friend_id) is True
        flags.delete_one.assert_called_once_with(
            {"itemId": ObjectId(item_id), "claimantId": ObjectId(friend_id)}
        )

    @pytest.mark.asyncio
    async def test_absent_flag_is_noop(self, service, wishlist_lookup, flags, item_id, friend_id):
        flags.delete_one.return_value = MagicMock(deleted_count=0)

        assert await service.unflag(item_id, friend_id) is False

    @pytest.mark.asyncio
    async def test_missing_item(self, service, collections, flags, friend_id):
        collections[WISHLIST_ITEMS].find_one.return_value = None

        with pytest.raises(NotFoundException):
            await service.unflag(str(ObjectId()), friend_id)

        flags.delete_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_claimant_id_is_not_found(self, service, wishlist_lookup, flags, item_id):
        with pytest.raises(NotFoundException) as exc_info:
            await service.unflag(item_id, "not-an-object-id")

        assert exc_info.value.code == "USER_NOT_FOUND"
        flags.delete_one.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# query_flags
# ─────────────────────────────────────────────────────────────────


class TestQueryFlags:
    @pytest.mark.asyncio
    async def test_owner_gets_empty_without_reading_flags(self, service, wishlist_lookup, flags, item_id, owner_id):
        result = await service.query_flags(item_id, owner_id)

        assert result == frozenset()
        flags.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_collaborator_gets_empty(self, service, wishlist_lookup, flags, item_id, collaborator_id):
        assert await service.query_flags(item_id, collaborator_id) == frozenset()
        flags.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_friend_sees_claimants(
        self, service, wishlist_lookup, flags, make_cursor, item_id, friend_id, other_friend_id,
    ):
        flags.find.return_value = make_cursor([{"claimantId": ObjectId(other_friend_id)}])

        result = await service.query_flags(item_id, friend_id)

        assert result == frozenset({other_friend_id})

    @pytest.mark.asyncio
    async def test_stranger_denied_before_flags_read(self, service, wishlist_lookup, flags, item_id, stranger_id):
        with pytest.raises(ForbiddenException):
            await service.query_flags(item_id, stranger_id)

        flags.find.assert_not_called()


class TestQueryWishlistFlags:
    @pytest.mark.asyncio
    async def test_owner_gets_empty(self, service, wishlist_lookup, flags, sample_wishlist_doc, owner_id):
        result = await service.query_wishlist_flags(str(sample_wishlist_doc["_id"]), owner_id)

        assert result == {}
        flags.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_groups_by_item(
        self, service, wishlist_lookup, flags, make_cursor, sample_wishlist_doc, friend_id, other_friend_id,
    ):
        item_a, item_b = ObjectId(), ObjectId()
        flags.find.return_value = make_cursor([
            {"itemId": item_a, "claimantId": ObjectId(friend_id)},
            {"itemId": item_a, "claimantId": ObjectId(other_friend_id)},
            {"itemId": item_b, "claimantId": ObjectId(other_friend_id)},
        ])

        result = await service.query_wishlist_flags(str(sample_wishlist_doc["_id"]), friend_id)

        assert result == {
            str(item_a): frozenset({friend_id, other_friend_id}),
            str(item_b): frozenset({other_friend_id}),
        }


# ─────────────────────────────────────────────────────────────────
# Owner-facing status
# ─────────────────────────────────────────────────────────────────


class TestOwnerClaimStatus:
    @pytest.mark.asyncio
    async def test_reports_claimed_without_identity(self, service, wishlist_lookup, flags, item_id):
        flags.count_documents.return_value = 1

        status = await service.owner_claim_status(item_id)

        assert status == OwnerClaimStatus(itemId=item_id, claimed=True)
        assert set(status.model_dump()) == {"itemId", "claimed"}

    @pytest.mark.asyncio
    async def test_reports_unclaimed(self, service, wishlist_lookup, flags, item_id):
        flags.count_documents.return_value = 0

        status = await service.owner_claim_status(item_id)

        assert status.claimed is False

    def test_status_cannot_carry_claimant(self):
        with pytest.raises(ValueError):
            OwnerClaimStatus(itemId="item-1", claimed=True, claimantId="friend-1")


class TestGetClaimsForUser:
    @pytest.mark.asyncio
    async def test_lists_own_claims(self, service, flags, make_cursor, friend_id):
        item, wishlist = ObjectId(), ObjectId()
        claimed_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
        flags.find.return_value = make_cursor([
            {"itemId": item, "wishlistId": wishlist, "claimantId": ObjectId(friend_id), "createdAt": claimed_at},
        ])

        claims = await service.get_claims_for_user(friend_id)

        assert claims == [{
            "itemId": str(item),
            "wishlistId": str(wishlist),
            "claimedAt": claimed_at.isoformat(),
        }]
        assert flags.find.call_args[0][0] == {"claimantId": ObjectId(friend_id)}

    @pytest.mark.asyncio
    async def test_malformed_claimant_id_is_not_found(self, service, flags):
        with pytest.raises(NotFoundException):
            await service.get_claims_for_user("not-an-object-id")

        flags.find.assert_not_called()
