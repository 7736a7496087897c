"""Shared test fixtures for Giftlist backend tests."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from giftlist.database.collections import (
    USERS,
    WISHLISTS,
    WISHLIST_ITEMS,
    OWNERSHIP_FLAGS,
    FRIENDSHIPS,
    NOTIFICATIONS,
)


def _make_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def collections():
    return {
        name: _make_collection()
        for name in (USERS, WISHLISTS, WISHLIST_ITEMS, OWNERSHIP_FLAGS, FRIENDSHIPS, NOTIFICATIONS)
    }


@pytest.fixture
def mock_db(collections):
    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=lambda name: collections[name])
    return db


@pytest.fixture
def make_cursor():
    """Build a Motor-like cursor returning `docs` from to_list()."""
    def _make(docs):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.skip.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=list(docs))
        return cursor
    return _make


# ─────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def owner_id():
    return str(ObjectId())


@pytest.fixture
def collaborator_id():
    return str(ObjectId())


@pytest.fixture
def friend_id():
    return str(ObjectId())


@pytest.fixture
def other_friend_id():
    return str(ObjectId())


@pytest.fixture
def stranger_id():
    return str(ObjectId())


@pytest.fixture
def mock_friend_service(friend_id, other_friend_id):
    """Owner's friends are `friend_id` and `other_friend_id`."""
    service = MagicMock()
    service.get_friend_ids = AsyncMock(return_value={friend_id, other_friend_id})
    service.are_friends = AsyncMock(return_value=True)
    service.get_friend_profiles = AsyncMock(return_value=[])
    return service


# ─────────────────────────────────────────────────────────────────
# Documents
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_wishlist_doc(owner_id, collaborator_id):
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "userId": ObjectId(owner_id),
        "name": "Birthday 2026",
        "description": None,
        "privacy": "friends",
        "collaborators": [ObjectId(collaborator_id)],
        "selectedFriends": [],
        "isArchived": False,
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def sample_item_doc(sample_wishlist_doc):
    return {
        "_id": ObjectId(),
        "wishlistId": sample_wishlist_doc["_id"],
        "title": "Espresso machine",
        "link": "https://example.com/espresso",
        "price": 249.0,
        "currency": "EUR",
        "notes": None,
        "createdAt": datetime.now(timezone.utc),
    }


@pytest.fixture
def wishlist_lookup(collections, sample_wishlist_doc, sample_item_doc):
    """Make the wishlist and item fixtures resolvable through find_one."""
    collections[WISHLISTS].find_one.return_value = sample_wishlist_doc
    collections[WISHLIST_ITEMS].find_one.return_value = sample_item_doc
    return collections
