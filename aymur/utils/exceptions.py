"""
HTTP errors raised by services and routes.

Each subclass fixes a status code and a default message; the app's
error handler renders them with `error_response`.
"""

from typing import Optional

from fastapi import HTTPException


class ServiceError(HTTPException):
    http_status = 400
    default_detail = "Request failed"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.http_status,
            detail=detail or self.default_detail,
            headers=headers,
        )


class AuthenticationError(ServiceError):
    http_status = 401
    default_detail = "Authentication failed"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ServiceError):
    http_status = 403
    default_detail = "Permission denied"


class NotFoundError(ServiceError):
    http_status = 404
    default_detail = "Resource not found"


class ConflictError(ServiceError):
    """The request is valid but the resource's current state does not allow it."""
    http_status = 409
    default_detail = "Resource conflict"


class ValidationError(ServiceError):
    http_status = 422
    default_detail = "Validation failed"
