"""
Auth + permission middleware.

For every non-public request:
  1. verify the bearer JWT (`sub` is the user id),
  2. pick the shop from the shop header, falling back to the token's
     `shop_id` claim,
  3. load the user's active shop_access record and attach a
     PermissionChecker as `request.state.permissions`.

A user without an active record in the shop is let through with an
empty checker; route decorators then answer 403.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from aymur.access.service import AccessService
from aymur.auth.helpers import decode_access_token
from aymur.config import get_database, settings
from aymur.utils import AuthenticationError, Logger, error_response

logger = Logger("auth")

PUBLIC_PATHS = frozenset({"/health", "/openapi.json", "/api/docs", "/api/docs/oauth2-redirect"})


def _bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationError("Missing Authorization header")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid token format. Expected 'Bearer <token>'")
    return token.strip()


class AuthPermissionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        try:
            claims = decode_access_token(_bearer_token(request))
        except AuthenticationError as exc:
            logger.warning(f"401 {request.method} {request.url.path}: {exc.detail}")
            response = error_response(exc.detail, code=401)
            response.headers.update(exc.headers or {})
            return response

        user_id = claims["sub"]
        shop_id = request.headers.get(settings.shop_header) or claims.get("shop_id")

        db = await get_database()
        request.state.user = claims
        request.state.shop_id = shop_id
        request.state.permissions = await AccessService(db).get_checker(user_id, shop_id)

        return await call_next(request)
