"""
Built-in notification types.

`build_default_registry` is called once at startup; the frozen registry
it returns is shared by the renderer and the notification service.
"""

from typing import Optional

from giftlist.notifications.registry import NotificationTypeEntry, NotificationTypeRegistry
from giftlist.notifications.types import (
    BirthdayReminderMetadata,
    CollaboratorInvitedMetadata,
    CollaboratorLeftMetadata,
    FriendRequestAcceptedMetadata,
    FriendRequestReceivedMetadata,
    GiftReceivedMetadata,
    ItemAddedMetadata,
    NotificationCategory,
    NotificationType,
    OwnershipFlagMetadata,
    WishlistArchivedMetadata,
    WishlistCreatedMetadata,
)


# =============================================================================
# Birthday reminders
# =============================================================================

def birthday_message(meta: BirthdayReminderMetadata) -> str:
    if meta.friend_name:
        possessive = f"{meta.friend_name}'s"
    else:
        possessive = "your friend's"

    if meta.days_until == 0:
        return f"Today is {possessive} birthday! 🎉"
    if meta.days_until == 1:
        return f"{possessive[0].upper()}{possessive[1:]} birthday is tomorrow"
    if meta.days_until < 0:
        return f"{possessive[0].upper()}{possessive[1:]} birthday has passed"
    return f"{possessive[0].upper()}{possessive[1:]} birthday is in {meta.days_until} days"


def birthday_badge(meta: BirthdayReminderMetadata) -> Optional[str]:
    if meta.days_until == 0:
        return "Today!"
    if meta.days_until == 1:
        return "Tomorrow"
    return None


def _friend_url(meta: BirthdayReminderMetadata) -> Optional[str]:
    return f"/friends/{meta.friend_id}" if meta.friend_id else "/friends"


# =============================================================================
# Registry
# =============================================================================

DEFAULT_ENTRIES = [
    # Social
    NotificationTypeEntry(
        type=NotificationType.FRIEND_REQUEST_RECEIVED.value,
        metadata_model=FriendRequestReceivedMetadata,
        category=NotificationCategory.SOCIAL,
        title=lambda meta: "New Friend Request",
        message=lambda meta: f"{meta.requester_name} sent you a friend request",
        action_url=lambda meta: "/friends",
        component="friend_request",
        icon="user-plus",
        priority=5,
    ),
    NotificationTypeEntry(
        type=NotificationType.FRIEND_REQUEST_ACCEPTED.value,
        metadata_model=FriendRequestAcceptedMetadata,
        category=NotificationCategory.SOCIAL,
        title=lambda meta: "Friend Request Accepted",
        message=lambda meta: f"{meta.accepter_name} accepted your friend request",
        action_url=lambda meta: f"/friends/{meta.accepter_id}",
        component="friend_request",
        icon="users",
        color="text-green-500",
        priority=4,
    ),

    # Reminders
    NotificationTypeEntry(
        type=NotificationType.BIRTHDAY_REMINDER.value,
        metadata_model=BirthdayReminderMetadata,
        category=NotificationCategory.REMINDERS,
        title=lambda meta: "Birthday Reminder",
        message=birthday_message,
        action_url=_friend_url,
        component="birthday_reminder",
        badge=birthday_badge,
        icon="cake",
        color="text-pink-500",
        priority=5,
    ),

    # Wishlist activity
    NotificationTypeEntry(
        type=NotificationType.WISHLIST_CREATED.value,
        metadata_model=WishlistCreatedMetadata,
        category=NotificationCategory.WISHLIST_ACTIVITY,
        title=lambda meta: "New Wishlist",
        message=lambda meta: f"{meta.owner_name} created a new wishlist: {meta.wishlist_name}",
        action_url=lambda meta: f"/friends/{meta.owner_id}/wishlists/{meta.wishlist_id}",
        component="wishlist_activity",
        icon="gift",
        color="text-purple-500",
        priority=2,
    ),
    NotificationTypeEntry(
        type=NotificationType.ITEM_ADDED.value,
        metadata_model=ItemAddedMetadata,
        category=NotificationCategory.WISHLIST_ACTIVITY,
        title=lambda meta: "New Item Added",
        message=lambda meta: f'{meta.owner_name} added "{meta.item_title}" to {meta.wishlist_name}',
        action_url=lambda meta: (
            f"/friends/{meta.owner_id}/wishlists/{meta.wishlist_id}#item-{meta.item_id}"
        ),
        component="wishlist_activity",
        icon="package",
        color="text-blue-500",
        priority=2,
    ),
    NotificationTypeEntry(
        type=NotificationType.WISHLIST_ARCHIVED.value,
        metadata_model=WishlistArchivedMetadata,
        category=NotificationCategory.WISHLIST_ACTIVITY,
        title=lambda meta: "Wishlist Archived",
        message=lambda meta: f"{meta.owner_name} archived their wishlist: {meta.wishlist_name}",
        action_url=lambda meta: f"/friends/{meta.owner_id}",
        component="wishlist_activity",
        icon="archive",
        color="text-gray-500",
        priority=1,
    ),

    # Gift claims
    NotificationTypeEntry(
        type=NotificationType.OWNERSHIP_FLAG.value,
        metadata_model=OwnershipFlagMetadata,
        category=NotificationCategory.GIFT_CLAIMS,
        title=lambda meta: "Item Claimed",
        message=lambda meta: f'Someone is getting you "{meta.item_title}" from {meta.wishlist_name}',
        action_url=lambda meta: f"/wishlists/{meta.wishlist_id}#item-{meta.item_id}",
        component="ownership_flag",
        icon="flag",
        color="text-amber-500",
        priority=4,
    ),
    NotificationTypeEntry(
        type=NotificationType.GIFT_RECEIVED.value,
        metadata_model=GiftReceivedMetadata,
        category=NotificationCategory.GIFT_CLAIMS,
        title=lambda meta: "Gift Received!",
        message=lambda meta: (
            f'{meta.recipient_name} marked "{meta.item_title}" as received. '
            f"Thank you for the gift!"
        ),
        action_url=lambda meta: (
            f"/friends/{meta.recipient_id}/wishlists/{meta.wishlist_id}#item-{meta.item_id}"
        ),
        component="gift",
        icon="gift",
        color="text-green-500",
        priority=5,
    ),

    # Collaboration
    NotificationTypeEntry(
        type=NotificationType.COLLABORATOR_INVITED.value,
        metadata_model=CollaboratorInvitedMetadata,
        category=NotificationCategory.COLLABORATION,
        title=lambda meta: "Invited to Collaborate",
        message=lambda meta: f'{meta.inviter_name} invited you to collaborate on "{meta.wishlist_name}"',
        action_url=lambda meta: f"/wishlists/{meta.wishlist_id}",
        component="wishlist_activity",
        icon="user-plus",
        color="text-purple-500",
        priority=4,
    ),
    NotificationTypeEntry(
        type=NotificationType.COLLABORATOR_LEFT.value,
        metadata_model=CollaboratorLeftMetadata,
        category=NotificationCategory.COLLABORATION,
        title=lambda meta: "Collaborator Left",
        message=lambda meta: f'{meta.leaver_name} left the collaboration on "{meta.wishlist_name}"',
        action_url=lambda meta: f"/wishlists/{meta.wishlist_id}",
        component="wishlist_activity",
        icon="user-minus",
        color="text-orange-500",
        priority=2,
    ),
]


def build_default_registry() -> NotificationTypeRegistry:
    """
    Build and freeze the registry of all built-in notification types.

    Returns:
        Frozen NotificationTypeRegistry
    """
    registry = NotificationTypeRegistry()
    for entry in DEFAULT_ENTRIES:
        registry.register(entry)
    return registry.freeze()
