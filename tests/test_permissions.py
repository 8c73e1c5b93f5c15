import logging

import pytest

from app.logic.exceptions import PermissionDenied
from app.logic.permissions import (
    Role,
    NO_PERMISSIONS,
    CAPABILITY_FLAGS,
    permissions_for,
    effective_permissions,
    has_permission,
    ensure_permission,
    get_approval_level,
    can_access_admin_panel,
)


def test_managing_director_has_unlimited_access():
    perms = permissions_for(Role.MANAGING_DIRECTOR)
    assert perms.has_unlimited_access
    assert perms.can_final_approve_guest_rooms
    assert perms.can_final_approve_facilities
    assert not perms.can_approve_users
    assert perms.approval_level == 3


def test_plain_members_have_no_capabilities():
    for role in (Role.EMPLOYEE, Role.THIRD_PARTY):
        perms = permissions_for(role)
        assert not any(getattr(perms, flag) for flag in CAPABILITY_FLAGS)
        assert perms.approval_level == 0


def test_superadmin_manages_accounts_but_not_bookings():
    perms = permissions_for("superadmin")
    assert perms.can_approve_users and perms.can_approve_admins and perms.can_approve_third_party
    assert not perms.can_approve_guest_rooms
    assert not perms.can_approve_facilities


def test_legacy_role_resolves_to_no_permissions(caplog):
    with caplog.at_level(logging.WARNING):
        assert permissions_for("admin") == NO_PERMISSIONS
    assert "Legacy role 'admin'" in caplog.text


def test_unknown_role_resolves_to_no_permissions():
    assert permissions_for("janitor") == NO_PERMISSIONS
    assert permissions_for(None) == NO_PERMISSIONS


def test_effective_permissions_is_union_of_roles():
    perms = effective_permissions(["hr_office", "club_house_manager"])
    assert perms.can_download_reports  # from hr_office
    assert perms.can_update_menu  # from club_house_manager
    assert perms.can_manage_room_availability
    assert not perms.has_unlimited_access
    assert perms.approval_level == 2


def test_effective_permissions_ignores_legacy_roles():
    assert effective_permissions(["hr_head", "department_head"]) == NO_PERMISSIONS
    assert effective_permissions([]) == NO_PERMISSIONS


def test_has_permission():
    assert has_permission(["employee", "hr_office"], "can_approve_guest_rooms")
    assert not has_permission(["employee"], "can_approve_guest_rooms")


def test_has_permission_rejects_unknown_flag():
    with pytest.raises(ValueError):
        has_permission(["hr_office"], "can_fly")


def test_ensure_permission_raises_permission_denied():
    with pytest.raises(PermissionDenied) as exc:
        ensure_permission(["employee"], "can_update_menu", "update the menu")
    assert exc.value.message == "Not allowed to update the menu"
    ensure_permission(["club_house_manager"], "can_update_menu", "update the menu")


def test_approval_level_and_admin_panel():
    assert get_approval_level(["employee", "managing_director"]) == 3
    assert can_access_admin_panel(["employee", "hr_office"])
    assert not can_access_admin_panel(["employee", "admin"])


def test_role_permissions_endpoint(client):
    response = client.get("/api/v1/permissions/hr_office")
    assert response.status_code == 200
    data = response.json()
    assert data["label"] == "HR Office"
    assert data["permissions"]["can_approve_guest_rooms"] is True
    assert data["permissions"]["can_update_menu"] is False


def test_role_permissions_endpoint_for_legacy_role(client):
    response = client.get("/api/v1/permissions/admin")
    assert response.status_code == 200
    data = response.json()
    assert data["label"] is None
    assert not any(data["permissions"][flag] for flag in CAPABILITY_FLAGS)


def test_my_permissions_reflect_all_roles(client, auth, make_user):
    user = make_user(["employee", "club_house_manager"])
    response = client.get("/api/v1/users/me/permissions", headers=auth(user))
    assert response.status_code == 200
    data = response.json()
    assert data["roles"] == ["employee", "club_house_manager"]
    assert data["permissions"]["can_manage_facilities"] is True
    assert data["permissions"]["can_approve_facilities"] is False
    assert data["can_access_admin_panel"] is True


def test_missing_user_header_is_unauthorized(client):
    assert client.get("/api/v1/users/me").status_code == 401
    assert client.get("/api/v1/users/me", headers={"X-User-Id": "abc"}).status_code == 401
    assert client.get("/api/v1/users/me", headers={"X-User-Id": "9999"}).status_code == 401
