"""
Giftlist application settings.

Extends the base settings with giftlist-specific configuration.
"""

from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Giftlist-specific settings."""

    # ==========================================================================
    # Notification Settings
    # ==========================================================================
    # Days ahead of a friend's birthday to send a reminder when the user
    # has no explicit preference. 0 disables the default reminder.
    BIRTHDAY_REMINDER_DAYS: int = 3

    # Default and maximum page size for notification listings
    NOTIFICATION_PAGE_SIZE: int = 20
    NOTIFICATION_MAX_PAGE_SIZE: int = 100

    # ==========================================================================
    # Wishlist Settings
    # ==========================================================================
    # Maximum number of collaborators on a joint wishlist
    MAX_COLLABORATORS: int = 10


settings = Settings()
