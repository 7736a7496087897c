"""Unit tests for bearer token verification dependencies."""

import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from common.auth import JWTAuth, create_auth_dependency, create_optional_auth_dependency
from common.utils.exceptions import UnauthorizedException

SECRET = "test-secret"


def make_token(subject="user-1", secret=SECRET, expires_in=timedelta(minutes=5)):
    now = datetime.now(timezone.utc)
    claims = {"iat": now, "exp": now + expires_in}
    if subject is not None:
        claims["sub"] = subject
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def auth():
    return JWTAuth(secret=SECRET)


@pytest.fixture
def get_user_id(auth):
    return create_auth_dependency(lambda: auth)


@pytest.fixture
def get_optional_user_id(auth):
    return create_optional_auth_dependency(lambda: auth)


class TestRequiredAuth:
    @pytest.mark.asyncio
    async def test_valid_token(self, get_user_id):
        assert await get_user_id(authorization=f"Bearer {make_token()}") == "user-1"

    @pytest.mark.asyncio
    async def test_missing_header(self, get_user_id):
        with pytest.raises(UnauthorizedException) as exc_info:
            await get_user_id(authorization=None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_wrong_scheme(self, get_user_id):
        with pytest.raises(UnauthorizedException) as exc_info:
            await get_user_id(authorization=f"Basic {make_token()}")
        assert exc_info.value.detail["code"] == "INVALID_AUTH_SCHEME"

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret(self, get_user_id):
        token = make_token(secret="other-secret")
        with pytest.raises(UnauthorizedException) as exc_info:
            await get_user_id(authorization=f"Bearer {token}")
        assert exc_info.value.detail["code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_expired_token(self, get_user_id):
        token = make_token(expires_in=timedelta(minutes=-1))
        with pytest.raises(UnauthorizedException) as exc_info:
            await get_user_id(authorization=f"Bearer {token}")
        assert exc_info.value.code == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_token_without_subject(self, get_user_id):
        token = make_token(subject=None)
        with pytest.raises(UnauthorizedException) as exc_info:
            await get_user_id(authorization=f"Bearer {token}")
        assert exc_info.value.message == "Token missing user ID"


class TestOptionalAuth:
    @pytest.mark.asyncio
    async def test_anonymous_is_none(self, get_optional_user_id):
        assert await get_optional_user_id(authorization=None) is None

    @pytest.mark.asyncio
    async def test_invalid_token_is_none(self, get_optional_user_id):
        assert await get_optional_user_id(authorization="Bearer garbage") is None

    @pytest.mark.asyncio
    async def test_valid_token(self, get_optional_user_id):
        assert await get_optional_user_id(authorization=f"Bearer {make_token()}") == "user-1"
