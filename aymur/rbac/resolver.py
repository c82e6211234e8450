"""
Permission resolution for a user within one shop.

The final map is the role's default table with per-user overrides
(shop_access.permissions) applied on top. Anything that cannot be
resolved (no access record, unknown key, malformed override) answers
"denied"; nothing here raises.
"""

from typing import Iterable, Mapping, Optional

from .permissions import (
    PermissionKey,
    get_default_permissions,
    parse_permission_key,
)
from .roles import ROLE_PROFILES, Role, parse_role, role_level


def extract_overrides(raw) -> dict[PermissionKey, bool]:
    """Keep only known permission keys with real boolean values."""
    if not isinstance(raw, Mapping):
        return {}

    overrides: dict[PermissionKey, bool] = {}
    for key, value in raw.items():
        permission = parse_permission_key(key)
        # bool only; 1/0 and "true" are dropped
        if permission is not None and isinstance(value, bool):
            overrides[permission] = value
    return overrides


def resolve_permissions(role, overrides=None) -> dict[PermissionKey, bool]:
    """
    Merge the default table for `role` with `overrides` (overrides win).

    The result always has exactly the keys of the default table.
    An unrecognised role name resolves against staff defaults.
    """
    resolved = get_default_permissions(parse_role(role) or Role.STAFF)
    resolved.update(extract_overrides(overrides))
    return resolved


def _empty_permissions() -> dict[PermissionKey, bool]:
    return {key: False for key in PermissionKey}


class PermissionChecker:
    """
    Boolean permission predicates for one user in one shop.

    Build with `for_access(role_name, overrides)` from the user's active
    access record, or `no_access()` when there is none.
    """

    def __init__(
        self,
        role: Optional[Role],
        overrides: Optional[Mapping] = None,
        *,
        hierarchy_role: Optional[Role] = None,
    ):
        self.role = role
        self.hierarchy_role = hierarchy_role
        self.overrides = extract_overrides(overrides)

        if role is None:
            self.permissions = _empty_permissions()
            self.has_universal_access = False
        else:
            self.permissions = resolve_permissions(role, self.overrides)
            self.has_universal_access = ROLE_PROFILES[role].has_universal_access

    @classmethod
    def no_access(cls) -> "PermissionChecker":
        return cls(None)

    @classmethod
    def for_access(cls, role_name, overrides=None) -> "PermissionChecker":
        # a missing or non-string stored role grants nothing
        if not role_name or not isinstance(role_name, str):
            return cls.no_access()
        role = parse_role(role_name)
        if role is None:
            # unrecognised role names get staff permissions but no rank
            return cls(Role.STAFF, overrides, hierarchy_role=None)
        return cls(role, overrides, hierarchy_role=role)

    @property
    def has_access(self) -> bool:
        return self.role is not None

    @property
    def hierarchy_level(self) -> Optional[int]:
        if self.hierarchy_role is None:
            return None
        return ROLE_PROFILES[self.hierarchy_role].level

    # ── Permission predicates ────────────────────────────────────

    def can(self, permission) -> bool:
        if self.role is None:
            return False
        key = parse_permission_key(permission)
        if key is None:
            return False
        if self.has_universal_access:
            return True
        return self.permissions.get(key, False)

    def cannot(self, permission) -> bool:
        return not self.can(permission)

    def can_any(self, permissions: Iterable) -> bool:
        permissions = list(permissions)
        if self.role is None or not permissions:
            return False
        return any(self.can(p) for p in permissions)

    def can_all(self, permissions: Iterable) -> bool:
        permissions = list(permissions)
        if self.role is None or not permissions:
            return False
        return all(self.can(p) for p in permissions)

    # ── Role predicates ──────────────────────────────────────────

    def has_role(self, role_name) -> bool:
        if self.hierarchy_role is None:
            return False
        return parse_role(role_name) == self.hierarchy_role

    def is_at_least(self, role_name) -> bool:
        """True when this user's rank is at or above `role_name` in the hierarchy."""
        own_level = self.hierarchy_level
        target_level = role_level(role_name)
        if own_level is None or target_level is None:
            return False
        return own_level <= target_level

    def to_dict(self) -> dict:
        return {
            "role": self.hierarchy_role.value if self.hierarchy_role else None,
            "has_access": self.has_access,
            "hierarchy_level": self.hierarchy_level,
            "permissions": {
                key.value: (True if self.has_universal_access else value)
                for key, value in self.permissions.items()
            },
            "overrides": {key.value: value for key, value in self.overrides.items()},
        }
