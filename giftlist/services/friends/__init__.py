"""
Friend services.
"""

from giftlist.services.friends.friend_service import FriendService

__all__ = ["FriendService"]
