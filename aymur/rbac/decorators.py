"""
Route decorators that check the PermissionChecker the auth middleware
attached to `request.state.permissions`.

Usage:
    @router.post("/cart/items")
    @require_permission(PermissionKey.SALES_CREATE)
    async def add_item(request: Request, ...):
        ...

The handler must take a `request: Request` parameter, and the decorator
goes below the route decorator.
"""

from functools import wraps
from typing import Callable, Optional

from starlette.requests import Request

from aymur.utils import ForbiddenError
from .resolver import PermissionChecker


def get_permission_checker(request: Request) -> PermissionChecker:
    """Checker attached by the auth middleware; an empty one if absent."""
    checker = getattr(request.state, "permissions", None)
    if isinstance(checker, PermissionChecker):
        return checker
    return PermissionChecker.no_access()


def _find_request(args, kwargs) -> Optional[Request]:
    request = kwargs.get("request")
    if isinstance(request, Request):
        return request
    return next((arg for arg in args if isinstance(arg, Request)), None)


def _guard(allowed: Callable[[PermissionChecker], bool], denied_message: str):
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)
            if request is None:
                raise RuntimeError(f"{func.__name__} has no Request parameter to check")
            if not allowed(get_permission_checker(request)):
                raise ForbiddenError(denied_message)
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(permission):
    """403 unless the caller's resolved permissions grant `permission`."""
    label = getattr(permission, "value", permission)
    return _guard(
        lambda checker: checker.can(permission),
        f"Permission denied. Requires: {label}",
    )


def require_role(role_name):
    """403 unless the caller ranks at `role_name` or above."""
    label = getattr(role_name, "value", role_name)
    return _guard(
        lambda checker: checker.is_at_least(role_name),
        f"Permission denied. Requires role: {label} or higher",
    )
