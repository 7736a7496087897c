"""
Friend graph service.

Reads accepted friendships. Creating and accepting friend requests is
handled elsewhere; this service only answers "who are X's friends".
"""

import logging
from typing import Any, Dict, List, Set

from motor.motor_asyncio import AsyncIOMotorDatabase

from giftlist.database.collections import FRIENDSHIPS, USERS
from giftlist.database.ids import to_user_id

logger = logging.getLogger(__name__)


class FriendService:
    """
    Read access to the undirected friend graph.

    A friendship document links `requesterId` and `addresseeId`; only
    documents with status "accepted" count as an edge.
    """

    ACCEPTED = "accepted"

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize FriendService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._friendships_collection = db[FRIENDSHIPS]
        self._users_collection = db[USERS]

    async def get_friend_ids(self, user_id: str) -> Set[str]:
        """
        Get ids of all accepted friends of a user.

        Args:
            user_id: User ID

        Returns:
            Set of friend user ids as strings
        """
        user_oid = to_user_id(user_id)
        cursor = self._friendships_collection.find(
            {
                "status": self.ACCEPTED,
                "$or": [{"requesterId": user_oid}, {"addresseeId": user_oid}],
            },
            {"requesterId": 1, "addresseeId": 1},
        )
        friendships = await cursor.to_list(length=None)

        friend_ids = set()
        for friendship in friendships:
            if friendship["requesterId"] == user_oid:
                friend_ids.add(str(friendship["addresseeId"]))
            else:
                friend_ids.add(str(friendship["requesterId"]))

        return friend_ids

    async def are_friends(self, user_id: str, other_id: str) -> bool:
        """Check whether an accepted friendship exists between two users."""
        if user_id == other_id:
            return False

        a, b = to_user_id(user_id), to_user_id(other_id)
        count = await self._friendships_collection.count_documents(
            {
                "status": self.ACCEPTED,
                "$or": [
                    {"requesterId": a, "addresseeId": b},
                    {"requesterId": b, "addresseeId": a},
                ],
            },
            limit=1,
        )
        return count > 0

    async def get_friend_profiles(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Get display profiles of a user's friends, sorted by name.

        Returns:
            List of {id, displayName, birthday}
        """
        friend_ids = await self.get_friend_ids(user_id)
        if not friend_ids:
            return []

        cursor = self._users_collection.find(
            {"_id": {"$in": [to_user_id(f) for f in friend_ids]}},
            {"displayName": 1, "birthday": 1},
        )
        users = await cursor.to_list(length=None)

        profiles = [
            {
                "id": str(u["_id"]),
                "displayName": u.get("displayName"),
                "birthday": u.get("birthday"),
            }
            for u in users
        ]
        profiles.sort(key=lambda p: (p["displayName"] or "").lower())
        return profiles
