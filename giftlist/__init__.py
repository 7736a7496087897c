"""
Giftlist application package.

Wishlist sharing with privacy-gated visibility, hidden gift claims and
typed notifications.
"""
