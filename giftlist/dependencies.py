"""
FastAPI dependencies for the Giftlist application.

Provides dependency injection for all services.
"""

from typing import Annotated, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import JWTAuth, create_auth_dependency, create_optional_auth_dependency

from giftlist.notifications.catalog import build_default_registry
from giftlist.notifications.registry import NotificationTypeRegistry
from giftlist.notifications.renderer import NotificationRenderer
from giftlist.services.claims.ownership_flag_service import OwnershipFlagService
from giftlist.services.friends.friend_service import FriendService
from giftlist.services.notifications.notification_service import NotificationService
from giftlist.services.wishlists.wishlist_service import WishlistService


# ─────────────────────────────────────────────────────────────────
# Service instances (initialized at startup)
# ─────────────────────────────────────────────────────────────────

_main_db: Optional[AsyncIOMotorDatabase] = None
_auth: Optional[JWTAuth] = None

_notification_registry: Optional[NotificationTypeRegistry] = None
_notification_renderer: Optional[NotificationRenderer] = None
_notification_service: Optional[NotificationService] = None

_friend_service: Optional[FriendService] = None
_wishlist_service: Optional[WishlistService] = None
_ownership_flag_service: Optional[OwnershipFlagService] = None


# ─────────────────────────────────────────────────────────────────
# Initialization
# ─────────────────────────────────────────────────────────────────

def init_auth(secret: str, algorithm: str = "HS256") -> None:
    """Initialize the token verifier."""
    global _auth
    _auth = JWTAuth(secret=secret, algorithm=algorithm)


def init_notification_services(db: AsyncIOMotorDatabase, default_reminder_days: int = 3) -> None:
    """Build the notification registry once and the services that share it."""
    global _notification_registry, _notification_renderer, _notification_service

    _notification_registry = build_default_registry()
    _notification_renderer = NotificationRenderer(_notification_registry)
    _notification_service = NotificationService(
        db,
        registry=_notification_registry,
        renderer=_notification_renderer,
        default_reminder_days=default_reminder_days,
    )


def init_wishlist_services(db: AsyncIOMotorDatabase, max_collaborators: int = 10) -> None:
    """Initialize friend, wishlist and claim services."""
    global _friend_service, _wishlist_service, _ownership_flag_service

    _friend_service = FriendService(db)
    _wishlist_service = WishlistService(
        db,
        friend_service=_friend_service,
        max_collaborators=max_collaborators,
    )
    _ownership_flag_service = OwnershipFlagService(db, wishlist_service=_wishlist_service)


def init_all_services(
    db: AsyncIOMotorDatabase,
    jwt_secret: str,
    jwt_algorithm: str = "HS256",
    max_collaborators: int = 10,
    birthday_reminder_days: int = 3,
) -> None:
    """
    Initialize all services.

    Args:
        db: Main database
        jwt_secret: Secret used to verify bearer tokens
        jwt_algorithm: JWT signing algorithm
        max_collaborators: Collaborator limit per wishlist
        birthday_reminder_days: Default birthday reminder preference
    """
    global _main_db
    _main_db = db

    init_auth(jwt_secret, jwt_algorithm)
    init_notification_services(db, default_reminder_days=birthday_reminder_days)
    init_wishlist_services(db, max_collaborators=max_collaborators)


# ─────────────────────────────────────────────────────────────────
# Auth
# ─────────────────────────────────────────────────────────────────

def get_auth_provider() -> JWTAuth:
    """Get auth provider instance."""
    if _auth is None:
        raise RuntimeError("Auth provider not initialized.")
    return _auth


_get_current_user_id = create_auth_dependency(get_auth_provider)
_get_optional_user_id = create_optional_auth_dependency(get_auth_provider)


async def require_auth(
    user_id: Annotated[str, Depends(_get_current_user_id)]
) -> dict:
    """Dependency that requires authentication."""
    return {"user_id": user_id}


async def optional_auth(
    user_id: Annotated[Optional[str], Depends(_get_optional_user_id)]
) -> Optional[dict]:
    """Dependency that optionally authenticates."""
    if not user_id:
        return None
    return {"user_id": user_id}


# ─────────────────────────────────────────────────────────────────
# Service getters
# ─────────────────────────────────────────────────────────────────

def get_main_db() -> AsyncIOMotorDatabase:
    """Get main database instance."""
    if _main_db is None:
        raise RuntimeError("Main database not initialized.")
    return _main_db


def get_notification_service() -> NotificationService:
    """Get notification service instance."""
    if _notification_service is None:
        raise RuntimeError("Notification service not initialized.")
    return _notification_service


def get_wishlist_service() -> WishlistService:
    """Get wishlist service instance."""
    if _wishlist_service is None:
        raise RuntimeError("Wishlist service not initialized.")
    return _wishlist_service


def get_ownership_flag_service() -> OwnershipFlagService:
    """Get ownership flag service instance."""
    if _ownership_flag_service is None:
        raise RuntimeError("Ownership flag service not initialized.")
    return _ownership_flag_service
