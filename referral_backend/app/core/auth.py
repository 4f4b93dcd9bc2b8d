"""
Access token handling.

Tokens are HS256 JWTs whose ``sub`` claim is the user id. Lifetime is fixed
by the server (``JWT_EXPIRY_HOURS``); callers cannot ask for a different one.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, HTTPException, Request

from referral_backend.app.core.exceptions import InvalidTokenError, TokenIssuanceError
from referral_backend.app.core.settings import Settings

JWT_ALGORITHM = "HS256"


class TokenIssuer:
    """Issues and verifies signed, time-bound identity tokens."""

    def __init__(self, secret: str, expiry_hours: int):
        self._secret = secret
        self._ttl = timedelta(hours=expiry_hours)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(settings.JWT_SECRET, settings.JWT_EXPIRY_HOURS)

    def issue(self, user_id: int) -> str:
        """
        Create JWT token for the given user.

        Raises:
            TokenIssuanceError: If signing fails
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "exp": now + self._ttl,
            "iat": now,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise TokenIssuanceError(f"jwt encode failed: {e}") from e

    def decode(self, token: str) -> int:
        """
        Decode JWT token and return the user id.

        Raises:
            InvalidTokenError: If the token is malformed, forged or expired
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
            return int(payload["sub"])
        except (jwt.InvalidTokenError, ValueError, KeyError) as e:
            raise InvalidTokenError() from e


def get_token_issuer(request: Request) -> TokenIssuer:
    """FastAPI dependency: the issuer built at startup."""
    return request.app.state.token_issuer


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> int:
    """
    FastAPI dependency to get and validate current user from JWT token.

    Expects Authorization header in format: "Bearer <token>"

    Use in endpoints that require JWT authentication:

        @router.get("/protected")
        async def protected_endpoint(
            user_id: int = Depends(get_current_user_id)
        ):
            ...

    Raises:
        HTTPException 401: If authentication fails
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Authorization header required"
        )

    # Extract token from "Bearer <token>"
    parts = authorization.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        raise HTTPException(
            status_code=401,
            detail="Invalid Authorization header format"
        )

    issuer = get_token_issuer(request)
    try:
        return issuer.decode(parts[1])
    except InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=e.message)
