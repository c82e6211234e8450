"""Mongo document serialisation and the JSON response envelope."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from fastapi.responses import JSONResponse

from .exceptions import ValidationError


def _serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (dict, list)):
        return serialize_mongo_doc(value)
    return value


def serialize_mongo_doc(doc):
    """JSON-safe copy of a document or list of documents; ids and dates become strings."""
    if not doc:
        return doc
    if isinstance(doc, list):
        return [_serialize_value(item) for item in doc]
    if isinstance(doc, dict):
        return {key: _serialize_value(value) for key, value in doc.items()}
    return doc


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    """ObjectId for `value`; a malformed id is a 422, not a lookup miss."""
    if not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label}")
    return ObjectId(value)


# ── Response envelope ────────────────────────────────────────────
#   success: {"success": true, "message": ..., "data": ...}
#   error:   {"success": false, "error": {"code": ..., "message": ...}}


def _envelope(success: bool, code: int, **fields) -> JSONResponse:
    content = {"success": success}
    content.update({key: value for key, value in fields.items() if value is not None})
    return JSONResponse(status_code=code, content=content)


def success_response(
    data: Optional[Any] = None,
    message: str = "Success",
    code: int = 200,
) -> JSONResponse:
    return _envelope(True, code, message=message, data=data)


def error_response(
    message: str,
    code: int = 400,
    data: Optional[Any] = None,
) -> JSONResponse:
    return _envelope(False, code, error={"code": code, "message": message}, data=data)
