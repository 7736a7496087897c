"""
JWT token verifier.

Verifies bearer tokens issued for the giftlist clients by the identity
provider. Tokens carry the user id in the `sub` claim.

Example:
    auth = JWTAuth(secret="your-secret-key")

    claims = await auth.verify_token(token)
    print(claims["sub"])  # user_id
"""

from typing import Dict, Any

from jose import jwt, JWTError

from common.auth.base import AuthProvider


class JWTAuth(AuthProvider):
    """
    JWT authentication provider.

    Expiry is enforced through the token's `exp` claim.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        """
        Initialize JWT auth provider.

        Args:
            secret: Secret key the tokens are signed with
            algorithm: JWT algorithm (default: HS256)
        """
        self.secret = secret
        self.algorithm = algorithm

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify and decode a JWT token."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
            )
            return payload
        except JWTError as e:
            raise ValueError(f"Invalid token: {e}")
