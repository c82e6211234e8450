"""
Shop access schemas: one record per (user, shop) holding the user's
role and optional permission overrides.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict

from aymur.rbac import Role, extract_overrides


class AccessRecord(BaseModel):
    user_id: str
    shop_id: str
    # stored values are untrusted; PermissionChecker.for_access cleans both
    role: Any = Field(None, description="Role name as stored")
    permissions: Any = Field(None, description="Raw overrides JSON")
    is_active: bool = True


class UpdateRoleRequest(BaseModel):
    """PUT /access/{user_id}/role"""
    role: Role


class UpdatePermissionsRequest(BaseModel):
    """PUT /access/{user_id}/permissions — replaces all overrides."""
    permissions: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("permissions")
    @classmethod
    def known_keys_only(cls, v):
        unknown = sorted(set(v) - {k.value for k in extract_overrides(v)})
        if unknown:
            raise ValueError(f"Unknown permission keys: {', '.join(unknown)}")
        return v
