"""
Shop roles and their place in the hierarchy.

Hierarchy (lower level = more privileged):
  owner (0) > manager (1) > finance (2) > staff (3)

Owners carry universal access: every permission check passes for them
regardless of the resolved permission map.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"
    FINANCE = "finance"
    STAFF = "staff"


@dataclass(frozen=True)
class RoleProfile:
    level: int
    has_universal_access: bool = False


ROLE_PROFILES: dict[Role, RoleProfile] = {
    Role.OWNER: RoleProfile(level=0, has_universal_access=True),
    Role.MANAGER: RoleProfile(level=1),
    Role.FINANCE: RoleProfile(level=2),
    Role.STAFF: RoleProfile(level=3),
}


def parse_role(value) -> Optional[Role]:
    """Return the Role for a case-insensitive name, or None if unrecognised."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None


def role_level(value) -> Optional[int]:
    """Hierarchy level for a role name; None for unknown or missing roles."""
    role = parse_role(value)
    if role is None:
        return None
    return ROLE_PROFILES[role].level
