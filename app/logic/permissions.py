"""Role to capability table.

The table mirrors what each portal role is allowed to do. Every API action
re-checks these flags on the server; the same table is exposed to clients
only so they can hide actions the user cannot take.
"""
from pydantic import BaseModel, ConfigDict
from typing import Dict, Iterable, Optional, Union
from enum import Enum
import logging

from app.logic.exceptions import PermissionDenied

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    MANAGING_DIRECTOR = "managing_director"
    HR_OFFICE = "hr_office"
    CLUB_HOUSE_MANAGER = "club_house_manager"
    EMPLOYEE = "employee"
    THIRD_PARTY = "third_party"


# Values still present in older user_roles rows. They carry no capabilities.
LEGACY_ROLES = frozenset({"admin", "hr_head", "department_head"})

ROLE_LABELS = {
    Role.SUPERADMIN: "Super Admin (IT)",
    Role.MANAGING_DIRECTOR: "Managing Director",
    Role.HR_OFFICE: "HR Office",
    Role.CLUB_HOUSE_MANAGER: "Club House Manager",
    Role.EMPLOYEE: "Employee",
    Role.THIRD_PARTY: "Third Party",
}


class RolePermissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_approve_users: bool = False
    can_approve_admins: bool = False
    can_approve_third_party: bool = False
    can_approve_guest_rooms: bool = False
    can_final_approve_guest_rooms: bool = False
    can_approve_facilities: bool = False
    can_final_approve_facilities: bool = False
    can_update_menu: bool = False
    can_manage_accommodations: bool = False
    can_manage_facilities: bool = False
    can_download_reports: bool = False
    can_manage_room_availability: bool = False
    has_unlimited_access: bool = False
    approval_level: int = 0


NO_PERMISSIONS = RolePermissions()

CAPABILITY_FLAGS = tuple(name for name in RolePermissions.model_fields if name != "approval_level")

ROLE_PERMISSIONS: Dict[Role, RolePermissions] = {
    Role.SUPERADMIN: RolePermissions(
        can_approve_users=True,
        can_approve_admins=True,
        can_approve_third_party=True,
        approval_level=0,
    ),
    Role.MANAGING_DIRECTOR: RolePermissions(
        can_approve_guest_rooms=True,
        can_final_approve_guest_rooms=True,
        can_approve_facilities=True,
        can_final_approve_facilities=True,
        can_download_reports=True,
        has_unlimited_access=True,
        approval_level=3,
    ),
    Role.HR_OFFICE: RolePermissions(
        can_approve_users=True,
        can_approve_guest_rooms=True,
        can_manage_accommodations=True,
        can_download_reports=True,
        approval_level=1,
    ),
    Role.CLUB_HOUSE_MANAGER: RolePermissions(
        can_approve_users=True,
        can_approve_guest_rooms=True,
        can_update_menu=True,
        can_manage_accommodations=True,
        can_manage_facilities=True,
        can_manage_room_availability=True,
        approval_level=2,
    ),
    Role.EMPLOYEE: NO_PERMISSIONS,
    Role.THIRD_PARTY: NO_PERMISSIONS,
}

ADMIN_PANEL_ROLES = frozenset({
    Role.SUPERADMIN,
    Role.MANAGING_DIRECTOR,
    Role.HR_OFFICE,
    Role.CLUB_HOUSE_MANAGER,
})


def parse_role(value: Union[Role, str, None]) -> Optional[Role]:
    """Return the canonical Role for a stored value, or None if it is not one."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def permissions_for(role: Union[Role, str, None]) -> RolePermissions:
    """Look up the capability set of a single role.

    Unknown and legacy values fall back to no elevated capabilities.
    """
    parsed = parse_role(role)
    if parsed is None:
        if role in LEGACY_ROLES:
            logger.warning(f"Legacy role '{role}' has no capabilities; reassign the user to a current role")
        else:
            logger.warning(f"Unrecognized role '{role}' resolved to no capabilities")
        return NO_PERMISSIONS
    return ROLE_PERMISSIONS[parsed]


def effective_permissions(roles: Iterable[Union[Role, str]]) -> RolePermissions:
    """Union of the capabilities of every role a user holds"""
    flags = {name: False for name in CAPABILITY_FLAGS}
    level = 0
    for role in roles:
        perms = permissions_for(role)
        for name in CAPABILITY_FLAGS:
            if getattr(perms, name):
                flags[name] = True
        level = max(level, perms.approval_level)
    return RolePermissions(**flags, approval_level=level)


def has_permission(roles: Iterable[Union[Role, str]], permission: str) -> bool:
    if permission not in CAPABILITY_FLAGS:
        raise ValueError(f"Unknown permission flag: {permission}")
    return bool(getattr(effective_permissions(roles), permission))


def ensure_permission(roles: Iterable[Union[Role, str]], permission: str, action: str) -> None:
    """Raise PermissionDenied unless one of the roles grants ``permission``"""
    if not has_permission(roles, permission):
        raise PermissionDenied(f"Not allowed to {action}")


def get_approval_level(roles: Iterable[Union[Role, str]]) -> int:
    return effective_permissions(roles).approval_level


def can_access_admin_panel(roles: Iterable[Union[Role, str]]) -> bool:
    return any(parse_role(role) in ADMIN_PANEL_ROLES for role in roles)
