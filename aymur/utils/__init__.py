from .helpers import (
    serialize_mongo_doc,
    success_response,
    error_response,
    parse_object_id,
)
from .logger import Logger
from .exceptions import (
    ServiceError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    ConflictError,
)

__all__ = [
    "serialize_mongo_doc",
    "success_response",
    "error_response",
    "parse_object_id",
    "Logger",
    "ServiceError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
]
