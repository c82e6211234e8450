"""
Server-side cart persistence.

Collection (shop-scoped):
    - {shop}_carts : one document per user,
      {"user_id", "state", "version", "updated_at"}

`version` counts saves. A save names the version it was loaded at and
only lands if the stored cart is still at that version.
"""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from aymur.tenant import get_shop_collection


class MongoCartRepository:
    def __init__(self, db: AsyncIOMotorDatabase, shop_id: str):
        self.carts = get_shop_collection(db, shop_id, "carts")

    async def load(self, user_id: str) -> tuple[Optional[dict], int]:
        """(saved state, version); (None, 0) when the user has no cart yet."""
        doc = await self.carts.find_one({"user_id": user_id})
        if not doc:
            return None, 0
        return doc.get("state"), doc.get("version", 0)

    async def save(self, user_id: str, state: dict, version: int) -> bool:
        """Store `state` as version + 1. False when another save got there first."""
        doc = {
            "user_id": user_id,
            "state": state,
            "version": version + 1,
            "updated_at": datetime.now(timezone.utc),
        }
        if version == 0:
            # first save for this user; the unique index turns a racing insert into a conflict
            await self.carts.create_index("user_id", unique=True)
            try:
                result = await self.carts.update_one(
                    {"user_id": user_id}, {"$setOnInsert": doc}, upsert=True
                )
            except DuplicateKeyError:
                return False
            return result.upserted_id is not None

        result = await self.carts.replace_one({"user_id": user_id, "version": version}, doc)
        return result.matched_count == 1
