from .roles import ROLE_PROFILES, Role, RoleProfile, parse_role, role_level
from .permissions import (
    DEFAULT_PERMISSIONS,
    PERMISSION_GROUPS,
    PERMISSION_LABELS,
    PermissionKey,
    get_default_permissions,
    parse_permission_key,
)
from .resolver import PermissionChecker, extract_overrides, resolve_permissions
from .decorators import get_permission_checker, require_permission, require_role

__all__ = [
    "ROLE_PROFILES",
    "Role",
    "RoleProfile",
    "parse_role",
    "role_level",
    "DEFAULT_PERMISSIONS",
    "PERMISSION_GROUPS",
    "PERMISSION_LABELS",
    "PermissionKey",
    "get_default_permissions",
    "parse_permission_key",
    "PermissionChecker",
    "extract_overrides",
    "resolve_permissions",
    "get_permission_checker",
    "require_permission",
    "require_role",
]
