import bcrypt

from app import config
from app.database.models.notification import Notification
from app.database.models.users import Profile


def register(client, **overrides):
    payload = {
        "email": "new.hire@example.com",
        "full_name": "New Hire",
        "password": "s3cret-pass",
        "department": "Finance",
    }
    payload.update(overrides)
    return client.post("/api/v1/users/register", json=payload)


def test_register_creates_unapproved_employee(client, db):
    response = register(client)
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["account_approved"] is False
    assert data["roles"] == ["employee"]

    profile = db.query(Profile).filter(Profile.email == "new.hire@example.com").one()
    assert profile.password_hash != "s3cret-pass"
    assert bcrypt.checkpw(b"s3cret-pass", profile.password_hash.encode("utf-8"))


def test_register_third_party(client):
    data = register(client, email="vendor@example.com", is_third_party=True).json()
    assert data["roles"] == ["third_party"]
    assert data["is_third_party"] is True


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    assert register(client).status_code == 400


def test_register_validates_input(client):
    assert register(client, email="not-an-email").status_code == 422
    assert register(client, password="123").status_code == 422


def test_default_role_cannot_be_an_admin_role(monkeypatch, client):
    monkeypatch.setattr(config, "DEFAULT_ROLE", "superadmin")
    assert register(client).json()["roles"] == ["employee"]


def test_pending_accounts_by_reviewer(client, auth, hr, superadmin):
    staff = register(client).json()
    vendor = register(client, email="vendor@example.com", is_third_party=True).json()

    hr_view = client.get("/api/v1/users/pending", headers=auth(hr)).json()
    assert [u["id"] for u in hr_view] == [staff["id"]]

    admin_view = client.get("/api/v1/users/pending", headers=auth(superadmin)).json()
    assert {u["id"] for u in admin_view} == {staff["id"], vendor["id"]}


def test_employee_cannot_review_accounts(client, auth, employee):
    assert client.get("/api/v1/users/pending", headers=auth(employee)).status_code == 403


def test_approve_account(client, auth, db, hr):
    user = register(client).json()
    response = client.post(f"/api/v1/users/{user['id']}/approve", headers=auth(hr))
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["account_approved"] is True
    assert data["roles"] == ["employee"]

    note = db.query(Notification).filter(Notification.user_id == user["id"]).one()
    assert note.title == "Account Approved"
    assert note.type == "account_approval"
    assert note.action_url == "/dashboard"

    again = client.post(f"/api/v1/users/{user['id']}/approve", headers=auth(hr))
    assert again.status_code == 400


def test_third_party_approval_needs_superadmin(client, auth, hr, superadmin):
    vendor = register(client, email="vendor@example.com", is_third_party=True).json()
    assert client.post(f"/api/v1/users/{vendor['id']}/approve", headers=auth(hr)).status_code == 403

    response = client.post(f"/api/v1/users/{vendor['id']}/approve", headers=auth(superadmin))
    assert response.status_code == 200
    assert response.json()["roles"] == ["third_party"]


def test_granting_admin_role_on_approval(client, auth, hr, superadmin):
    user = register(client).json()
    url = f"/api/v1/users/{user['id']}/approve"
    assert client.post(url, json={"role": "hr_office"}, headers=auth(hr)).status_code == 403

    response = client.post(url, json={"role": "hr_office"}, headers=auth(superadmin))
    assert response.status_code == 200
    assert response.json()["roles"] == ["hr_office"]


def test_decline_removes_registration(client, auth, hr, superadmin):
    user = register(client).json()
    response = client.post(f"/api/v1/users/{user['id']}/decline", headers=auth(hr))
    assert response.status_code == 200
    assert client.get(f"/api/v1/users/{user['id']}/roles", headers=auth(superadmin)).status_code == 404


def test_approved_account_cannot_be_declined(client, auth, employee, hr):
    assert client.post(f"/api/v1/users/{employee.id}/decline", headers=auth(hr)).status_code == 400


def test_list_users_requires_admin_panel(client, auth, employee, hr):
    assert client.get("/api/v1/users/", headers=auth(employee)).status_code == 403

    data = client.get("/api/v1/users/", params={"search": "Ada"}, headers=auth(hr)).json()
    assert data["total"] == 1
    assert data["users"][0]["id"] == employee.id


def test_list_users_filters_by_role(client, auth, employee, hr, club_manager):
    data = client.get("/api/v1/users/", params={"role": "hr_office"}, headers=auth(hr)).json()
    assert [u["id"] for u in data["users"]] == [hr.id]
    assert client.get("/api/v1/users/", params={"role": "admin"}, headers=auth(hr)).status_code == 400


def test_me(client, auth, employee):
    data = client.get("/api/v1/users/me", headers=auth(employee)).json()
    assert data["email"] == employee.email
    assert data["roles"] == ["employee"]


def test_update_my_profile(client, auth, db, employee):
    response = client.put(
        "/api/v1/users/me",
        json={"full_name": "Ada Lovelace", "phone": "+44 20 7946 0000"},
        headers=auth(employee),
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["full_name"] == "Ada Lovelace"
    assert data["phone"] == "+44 20 7946 0000"
    assert data["department"] == "Operations"
    assert data["updated_at"] is not None

    cleared = client.put("/api/v1/users/me", json={"phone": None}, headers=auth(employee)).json()
    assert cleared["phone"] is None
    assert cleared["full_name"] == "Ada Lovelace"


def test_profile_edit_cannot_change_account_flags_or_roles(client, auth, db, make_user):
    guest = make_user("third_party", approved=False, third_party=True)
    response = client.put(
        "/api/v1/users/me",
        json={
            "department": "Visitors",
            "account_approved": True,
            "is_third_party": False,
            "roles": ["superadmin"],
        },
        headers=auth(guest),
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["department"] == "Visitors"
    assert data["account_approved"] is False
    assert data["is_third_party"] is True
    assert data["roles"] == ["third_party"]

    db.expire_all()
    stored = db.query(Profile).filter(Profile.id == guest.id).one()
    assert stored.account_approved is False
    assert stored.is_third_party is True
    assert [r.role for r in stored.roles] == ["third_party"]


def test_profile_edit_rejects_empty_name(client, auth, employee):
    assert client.put("/api/v1/users/me", json={"full_name": None}, headers=auth(employee)).status_code == 422
    assert client.put("/api/v1/users/me", json={"full_name": ""}, headers=auth(employee)).status_code == 422
