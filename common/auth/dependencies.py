"""
FastAPI authentication dependencies.

Provides factory functions to create auth dependencies that can be
injected into route handlers. Works with any AuthProvider implementation.

Example:
    from common.auth import JWTAuth, create_auth_dependency

    auth = JWTAuth(secret="your-secret")
    get_current_user_id = create_auth_dependency(lambda: auth)

    @app.get("/wishlists")
    async def list_wishlists(user_id: str = Depends(get_current_user_id)):
        return {"user_id": user_id}
"""

from typing import Callable, Optional
from fastapi import Header

from common.auth.base import AuthProvider
from common.utils.exceptions import UnauthorizedException


def _extract_token(authorization: Optional[str], scheme: str) -> Optional[str]:
    """Return the raw token from an `Authorization` header, or None."""
    if not authorization:
        return None

    prefix = f"{scheme} "
    if not authorization.startswith(prefix):
        return None

    return authorization[len(prefix):] or None


def create_auth_dependency(
    get_auth_provider: Callable[[], AuthProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create FastAPI auth dependencies.

    Args:
        get_auth_provider: Callable that returns the AuthProvider instance
        header_name: Header to extract token from (default: Authorization)
        scheme: Auth scheme prefix (default: Bearer)

    Returns:
        A FastAPI dependency function that extracts and verifies the user ID
    """

    async def get_current_user_id(
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> str:
        """
        Extract and verify user ID from the authorization header.

        Raises:
            UnauthorizedException: If token is missing, invalid, or expired
        """
        if not authorization:
            raise UnauthorizedException("Missing authorization header")

        token = _extract_token(authorization, scheme)
        if not token:
            raise UnauthorizedException(
                f"Invalid authorization scheme. Expected: {scheme}",
                code="INVALID_AUTH_SCHEME",
            )

        auth = get_auth_provider()
        try:
            payload = await auth.verify_token(token)
        except ValueError as e:
            raise UnauthorizedException(str(e), code="INVALID_TOKEN")

        user_id = payload.get("sub") or payload.get("uid")
        if not user_id:
            raise UnauthorizedException("Token missing user ID", code="INVALID_TOKEN")

        return user_id

    return get_current_user_id


def create_optional_auth_dependency(
    get_auth_provider: Callable[[], AuthProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create optional auth dependency.

    Unlike create_auth_dependency, this returns None instead of raising
    an exception when no valid token is provided. Anonymous viewers are
    then denied by the privacy gate rather than by the auth layer.

    Returns:
        A FastAPI dependency that returns user_id or None
    """

    async def get_optional_user_id(
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> Optional[str]:
        """
        Extract and verify user ID, returning None if not authenticated.
        """
        token = _extract_token(authorization, scheme)
        if not token:
            return None

        auth = get_auth_provider()
        try:
            payload = await auth.verify_token(token)
            return payload.get("sub") or payload.get("uid")
        except ValueError:
            return None

    return get_optional_user_id
