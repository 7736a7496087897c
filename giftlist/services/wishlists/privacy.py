"""
Wishlist privacy policy.

Pure visibility rules for wishlists. Nothing in here touches the database:
callers load the wishlist document and the owner's friend ids, then ask
`can_view` before returning any wishlist, item or claim data.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Dict, FrozenSet, Optional

logger = logging.getLogger(__name__)


class PrivacyMode(str, Enum):
    """Stored wishlist privacy values."""

    PRIVATE = "private"
    FRIENDS = "friends"
    SELECTED_FRIENDS = "selected_friends"
    # Legacy alias of FRIENDS. Accepted on read, never written.
    PUBLIC = "public"


# Values a client may submit. "public" is mapped to "friends" on the way in.
WRITABLE_PRIVACY_MODES = (
    PrivacyMode.PRIVATE,
    PrivacyMode.FRIENDS,
    PrivacyMode.SELECTED_FRIENDS,
)


def normalize_privacy(value: str) -> PrivacyMode:
    """
    Normalize a privacy value at the write boundary.

    Args:
        value: Raw privacy string from a request

    Returns:
        The PrivacyMode to persist (never PUBLIC)

    Raises:
        ValueError: If the value is not a known privacy mode
    """
    try:
        mode = PrivacyMode(value)
    except ValueError:
        allowed = ", ".join(m.value for m in WRITABLE_PRIVACY_MODES)
        raise ValueError(f"Invalid privacy setting '{value}'. Expected one of: {allowed}")

    if mode is PrivacyMode.PUBLIC:
        return PrivacyMode.FRIENDS
    return mode


def effective_privacy(value: Optional[str]) -> PrivacyMode:
    """
    Resolve a stored privacy value to the mode that governs visibility.

    Legacy "public" resolves to FRIENDS. Unknown or missing values fail
    closed to PRIVATE.
    """
    try:
        mode = PrivacyMode(value)
    except ValueError:
        logger.warning(f"Unknown stored privacy value {value!r}, treating as private")
        return PrivacyMode.PRIVATE

    if mode is PrivacyMode.PUBLIC:
        return PrivacyMode.FRIENDS
    return mode


@dataclass(frozen=True)
class WishlistPolicy:
    """The subset of a wishlist that decides who may see it."""

    owner_id: str
    privacy: PrivacyMode
    collaborator_ids: FrozenSet[str] = field(default_factory=frozenset)
    selected_friend_ids: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_document(cls, wishlist: Dict[str, Any]) -> "WishlistPolicy":
        """Build a policy from a stored wishlist document."""
        return cls(
            owner_id=str(wishlist["userId"]),
            privacy=effective_privacy(wishlist.get("privacy")),
            collaborator_ids=frozenset(str(c) for c in wishlist.get("collaborators") or []),
            selected_friend_ids=frozenset(str(f) for f in wishlist.get("selectedFriends") or []),
        )

    @property
    def owner_ids(self) -> FrozenSet[str]:
        """Primary owner plus collaborators."""
        return self.collaborator_ids | {self.owner_id}

    def is_owner(self, user_id: Optional[str]) -> bool:
        """True for the primary owner or any collaborator."""
        return bool(user_id) and str(user_id) in self.owner_ids


def can_view(
    viewer_id: Optional[str],
    policy: WishlistPolicy,
    owner_friend_ids: Collection[str],
) -> bool:
    """
    Decide whether a viewer may see a wishlist.

    Args:
        viewer_id: Verified identity of the viewer, or None if anonymous
        policy: Visibility policy of the wishlist
        owner_friend_ids: Ids of the primary owner's accepted friends

    Returns:
        True if the viewer may see the wishlist and its items
    """
    if not viewer_id:
        return False

    viewer_id = str(viewer_id)

    if policy.is_owner(viewer_id):
        return True

    if policy.privacy is PrivacyMode.PRIVATE:
        return False

    is_friend = viewer_id in {str(f) for f in owner_friend_ids}

    if policy.privacy is PrivacyMode.FRIENDS:
        return is_friend

    if policy.privacy is PrivacyMode.SELECTED_FRIENDS:
        return is_friend and viewer_id in policy.selected_friend_ids

    return False
