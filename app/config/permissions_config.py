"""
Team Role Permissions Configuration
Fixed role -> capability matrix for team-scoped operations.

Roles are not ranked: each role carries an explicit capability set, and
`member` / `viewer` differ in ways a numeric level cannot express.
Team owners are resolved to the `admin` row by the membership resolver;
this module knows nothing about ownership.
"""

from pydantic import BaseModel, ConfigDict
from typing import Dict, Tuple

from app.core.errors import InvalidRoleError

ADMIN = "admin"
MEMBER = "member"
VIEWER = "viewer"

ROLES: Tuple[str, ...] = (ADMIN, MEMBER, VIEWER)

# Role given to invitees when none is requested
DEFAULT_INVITE_ROLE = MEMBER

CAPABILITIES: Tuple[str, ...] = (
    "can_view_tasks",
    "can_create_tasks",
    "can_update_tasks",
    "can_delete_tasks",
    "can_manage_team",
    "can_invite_members",
    "can_assign_roles",
)


class CapabilitySet(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_view_tasks: bool
    can_create_tasks: bool
    can_update_tasks: bool
    can_delete_tasks: bool
    can_manage_team: bool
    can_invite_members: bool
    can_assign_roles: bool


ROLE_PERMISSIONS: Dict[str, CapabilitySet] = {
    ADMIN: CapabilitySet(
        can_view_tasks=True,
        can_create_tasks=True,
        can_update_tasks=True,
        can_delete_tasks=True,
        can_manage_team=True,
        can_invite_members=True,
        can_assign_roles=True,
    ),
    MEMBER: CapabilitySet(
        can_view_tasks=True,
        can_create_tasks=True,
        can_update_tasks=True,
        can_delete_tasks=False,
        can_manage_team=False,
        can_invite_members=True,
        can_assign_roles=False,
    ),
    VIEWER: CapabilitySet(
        can_view_tasks=True,
        can_create_tasks=False,
        can_update_tasks=False,
        can_delete_tasks=False,
        can_manage_team=False,
        can_invite_members=False,
        can_assign_roles=False,
    ),
}


def is_valid_role(role: object) -> bool:
    return isinstance(role, str) and role in ROLE_PERMISSIONS


def capabilities_for(role: str) -> CapabilitySet:
    """Return the capability set of a role. Unknown roles raise InvalidRoleError."""
    if not is_valid_role(role):
        raise InvalidRoleError(role)
    return ROLE_PERMISSIONS[role]


def has_capability(role: str, capability: str) -> bool:
    if capability not in CAPABILITIES:
        raise ValueError(f"Unknown capability: {capability}")
    return getattr(capabilities_for(role), capability)


def get_permission_matrix() -> Dict[str, Dict[str, bool]]:
    """
    Returns the whole matrix as plain data, e.g. for the frontend:
    {"admin": {"can_view_tasks": True, ...}, "member": {...}, "viewer": {...}}
    """
    return {role: caps.model_dump() for role, caps in ROLE_PERMISSIONS.items()}
