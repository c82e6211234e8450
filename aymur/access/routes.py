"""
Access routes — the caller's resolved permissions and staff role management.

Endpoints:
    GET  /me                       Caller's role + resolved permission map
    GET  /catalog                  Permission keys by group, with labels
    GET  /                         All access records for the shop
    PUT  /{user_id}/role           Change a member's role
    PUT  /{user_id}/permissions    Replace a member's permission overrides

The owner role is never assigned here, and the owner's record is read-only (409).
"""

from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from aymur.config import get_database
from aymur.rbac import (
    PERMISSION_GROUPS,
    PERMISSION_LABELS,
    PermissionKey,
    get_permission_checker,
    require_permission,
)
from aymur.tenant import require_shop_id
from aymur.utils import success_response
from .schemas import UpdatePermissionsRequest, UpdateRoleRequest
from .service import AccessService

access_router = APIRouter()


@access_router.get("/me")
async def my_permissions(request: Request):
    """Role, hierarchy level and resolved permissions for the caller."""
    return success_response(data=get_permission_checker(request).to_dict())


@access_router.get("/catalog")
async def permission_catalog(request: Request):
    """Known permission keys grouped by domain, with display labels."""
    return success_response(
        data={
            group: [{"key": k.value, "label": PERMISSION_LABELS[k]} for k in keys]
            for group, keys in PERMISSION_GROUPS.items()
        }
    )


@access_router.get("/")
@require_permission(PermissionKey.STAFF_VIEW)
async def list_access(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """List every member's access record in this shop."""
    svc = AccessService(db)
    return success_response(data=await svc.list_for_shop(require_shop_id(request)))


@access_router.put("/{user_id}/role")
@require_permission(PermissionKey.STAFF_MANAGE_ROLES)
async def update_role(
    request: Request,
    user_id: str,
    body: UpdateRoleRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = AccessService(db)
    record = await svc.update_role(user_id, require_shop_id(request), body.role)
    return success_response(data=record, message="Role updated")


@access_router.put("/{user_id}/permissions")
@require_permission(PermissionKey.STAFF_MANAGE_ROLES)
async def update_permissions(
    request: Request,
    user_id: str,
    body: UpdatePermissionsRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = AccessService(db)
    record = await svc.update_overrides(user_id, require_shop_id(request), body.permissions)
    return success_response(data=record, message="Permissions updated")
