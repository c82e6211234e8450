"""Shop access service: reads and updates the global shop_access collection."""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from aymur.rbac import PermissionChecker, Role, extract_overrides, parse_role
from aymur.tenant import get_global_collection
from aymur.utils import ConflictError, Logger, NotFoundError, serialize_mongo_doc
from .schemas import AccessRecord

logger = Logger("access")


class AccessService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.access = get_global_collection(db, "shop_access")

    async def get_active_record(self, user_id: str, shop_id: str) -> Optional[AccessRecord]:
        """Active access record for this user in this shop, or None."""
        doc = await self.access.find_one(
            {"user_id": user_id, "shop_id": shop_id, "is_active": True}
        )
        if not doc:
            return None
        return AccessRecord.model_validate(serialize_mongo_doc(doc))

    async def get_checker(self, user_id: Optional[str], shop_id: Optional[str]) -> PermissionChecker:
        """Resolve the caller's permissions; no record means no access."""
        if not user_id or not shop_id:
            return PermissionChecker.no_access()
        record = await self.get_active_record(user_id, shop_id)
        if record is None:
            logger.warning(f"No active access for user={user_id} shop={shop_id}")
            return PermissionChecker.no_access()
        return PermissionChecker.for_access(record.role, record.permissions)

    async def list_for_shop(self, shop_id: str) -> list[dict]:
        cursor = self.access.find({"shop_id": shop_id}).sort("created_at", 1)
        return [serialize_mongo_doc(d) async for d in cursor]

    async def _get_member(self, user_id: str, shop_id: str) -> dict:
        """Target record for an update; the shop owner's record is never editable."""
        doc = await self.access.find_one({"user_id": user_id, "shop_id": shop_id})
        if not doc:
            raise NotFoundError("Access record not found")
        if parse_role(doc.get("role")) == Role.OWNER:
            raise ConflictError("Cannot modify the shop owner's access")
        return doc

    async def _update(self, doc: dict, fields: dict) -> dict:
        fields["updated_at"] = datetime.now(timezone.utc)
        result = await self.access.find_one_and_update(
            {"user_id": doc["user_id"], "shop_id": doc["shop_id"]},
            {"$set": fields},
            return_document=True,
        )
        if not result:
            raise NotFoundError("Access record not found")
        return serialize_mongo_doc(result)

    async def update_role(self, user_id: str, shop_id: str, role: Role) -> dict:
        if role == Role.OWNER:
            raise ConflictError("Cannot assign the owner role")
        doc = await self._get_member(user_id, shop_id)
        logger.info(f"Role change user={user_id} shop={shop_id} -> {role.value}")
        return await self._update(doc, {"role": role.value})

    async def update_overrides(self, user_id: str, shop_id: str, overrides: dict) -> dict:
        doc = await self._get_member(user_id, shop_id)
        clean = {key.value: value for key, value in extract_overrides(overrides).items()}
        logger.info(f"Permission overrides user={user_id} shop={shop_id}: {len(clean)} keys")
        return await self._update(doc, {"permissions": clean})
