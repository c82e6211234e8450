"""
Shop collection resolver.

Shop-scoped data lives in `{shop_prefix}_{name}` collections, where the
prefix is the shop id lowercased with hyphens turned into underscores
(shop ids are UUIDs or slugs):

    get_shop_collection(db, "gold-house", "carts")  ->  db["gold_house_carts"]

Cross-shop data (e.g. `shop_access`) lives in global collections.
"""

import re

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from starlette.requests import Request

from aymur.utils import ValidationError

_SHOP_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-]{0,63}$")


def shop_prefix(shop_id: str) -> str:
    slug = (shop_id or "").strip().lower()
    if not _SHOP_ID_PATTERN.match(slug):
        raise ValidationError(f"Invalid shop id '{shop_id}'")
    return slug.replace("-", "_")


def require_shop_id(request: Request) -> str:
    """Shop the auth middleware resolved for this request; 422 when there is none."""
    shop_id = getattr(request.state, "shop_id", None)
    if not shop_id:
        raise ValidationError("No shop selected for this request")
    return shop_id


def get_shop_collection(
    db: AsyncIOMotorDatabase,
    shop_id: str,
    collection_name: str,
) -> AsyncIOMotorCollection:
    return db[f"{shop_prefix(shop_id)}_{collection_name}"]


def get_global_collection(
    db: AsyncIOMotorDatabase,
    collection_name: str,
) -> AsyncIOMotorCollection:
    return db[collection_name]
