"""
Notification types and their metadata models.

Metadata is stored on the notification document as-is and is the only
input to title and message generation, so every fact a notification
displays has to be captured here when it is created.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class NotificationType(str, Enum):
    """Registered notification discriminants."""

    BIRTHDAY_REMINDER = "birthday_reminder"
    OWNERSHIP_FLAG = "ownership_flag"
    FRIEND_REQUEST_RECEIVED = "friend_request_received"
    FRIEND_REQUEST_ACCEPTED = "friend_request_accepted"
    WISHLIST_CREATED = "wishlist_created"
    ITEM_ADDED = "item_added"
    WISHLIST_ARCHIVED = "wishlist_archived"
    COLLABORATOR_INVITED = "collaborator_invited"
    COLLABORATOR_LEFT = "collaborator_left"
    GIFT_RECEIVED = "gift_received"


class NotificationCategory(str, Enum):
    """Groupings used for filtering and preferences."""

    SOCIAL = "social"
    REMINDERS = "reminders"
    WISHLIST_ACTIVITY = "wishlist_activity"
    GIFT_CLAIMS = "gift_claims"
    COLLABORATION = "collaboration"


class NotificationMetadata(BaseModel):
    """Base class for metadata payloads."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Social
# =============================================================================

class FriendRequestReceivedMetadata(NotificationMetadata):
    friendship_id: str
    requester_id: str
    requester_name: str
    requester_avatar_url: Optional[str] = None


class FriendRequestAcceptedMetadata(NotificationMetadata):
    friendship_id: str
    accepter_id: str
    accepter_name: str
    accepter_avatar_url: Optional[str] = None


# =============================================================================
# Reminders
# =============================================================================

class BirthdayReminderMetadata(NotificationMetadata):
    """
    Birthday reminder payload.

    Only `days_until` is required; reminders created before names were
    captured still render.
    """

    days_until: int
    friend_id: Optional[str] = None
    friend_name: Optional[str] = None
    friend_avatar_url: Optional[str] = None
    birthday_date: Optional[str] = None


# =============================================================================
# Wishlist activity
# =============================================================================

class WishlistCreatedMetadata(NotificationMetadata):
    wishlist_id: str
    wishlist_name: str
    owner_id: str
    owner_name: str
    privacy: str


class ItemAddedMetadata(NotificationMetadata):
    wishlist_id: str
    wishlist_name: str
    item_id: str
    item_title: str
    item_price: Optional[float] = None
    item_currency: Optional[str] = None
    owner_id: str
    owner_name: str


class WishlistArchivedMetadata(NotificationMetadata):
    wishlist_id: str
    wishlist_name: str
    owner_id: str
    owner_name: str


# =============================================================================
# Gift claims
# =============================================================================

class OwnershipFlagMetadata(NotificationMetadata):
    """
    Owner-facing claim notification.

    Extra fields are rejected so a claimant id or name cannot be stored
    on a notification delivered to the wishlist's owners.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    item_id: str
    item_title: str
    wishlist_id: str
    wishlist_name: str


class GiftReceivedMetadata(NotificationMetadata):
    item_id: str
    item_title: str
    wishlist_id: str
    wishlist_name: str
    recipient_id: str
    recipient_name: str
    claim_type: Literal["solo", "split"] = "solo"
    marked_at: str


# =============================================================================
# Collaboration
# =============================================================================

class CollaboratorInvitedMetadata(NotificationMetadata):
    wishlist_id: str
    wishlist_name: str
    inviter_id: str
    inviter_name: str


class CollaboratorLeftMetadata(NotificationMetadata):
    wishlist_id: str
    wishlist_name: str
    leaver_id: str
    leaver_name: str
