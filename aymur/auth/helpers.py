"""
JWT helpers.

Tokens are issued by the account service; this service only verifies
them. Claims used here: `sub` (user id) and, optionally, `shop_id` as a
fallback when the request carries no shop header.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from aymur.config import settings
from aymur.utils import AuthenticationError


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """Verified claims; AuthenticationError if the token is expired, invalid or has no `sub`."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Invalid token")

    if not claims.get("sub"):
        raise AuthenticationError("Token has no subject")
    return claims
