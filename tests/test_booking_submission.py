from datetime import date, timedelta
from decimal import Decimal

from app.database.models.notification import Notification


def test_submit_accommodation_starts_pending_at_hr(client, auth, db, employee, accommodation_payload):
    response = client.post("/api/v1/bookings/accommodation", json=accommodation_payload, headers=auth(employee))
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert data["stages"] == {"department_approval": None, "hr_approval": "pending", "md_approval": None}
    assert data["current_stage"] == "hr_approval"
    assert data["requester_name"] == "Ada Employee"
    assert data["billing_to"] == "department"

    notes = db.query(Notification).filter(Notification.user_id == employee.id).all()
    assert len(notes) == 1
    assert notes[0].title == "Accommodation Request Submitted"
    assert notes[0].type == "booking_submitted"
    assert notes[0].message.endswith("pending HR approval.")
    assert "Grace Guest" in notes[0].message


def test_submit_accommodation_with_room(client, auth, employee, room, accommodation_payload):
    payload = dict(accommodation_payload, accommodation_id=room.id, guests=2)
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 201
    assert response.json()["accommodation_id"] == room.id


def test_room_capacity_is_enforced(client, auth, employee, room, accommodation_payload):
    payload = dict(accommodation_payload, accommodation_id=room.id, guests=3)
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 400
    assert "at most 2 guests" in response.json()["detail"]


def test_unknown_room_is_not_found(client, auth, employee, accommodation_payload):
    payload = dict(accommodation_payload, accommodation_id=999)
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 404


def test_check_out_must_follow_check_in(client, auth, employee, accommodation_payload):
    payload = dict(accommodation_payload, check_out_date=accommodation_payload["check_in_date"])
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 400


def test_same_day_stay_with_times(client, auth, employee, accommodation_payload):
    payload = dict(
        accommodation_payload,
        check_out_date=accommodation_payload["check_in_date"],
        check_in_time="09:00:00",
        check_out_time="18:00:00",
    )
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 201, response.text


def test_check_in_in_the_past_is_rejected(client, auth, employee, accommodation_payload):
    yesterday = date.today() - timedelta(days=1)
    payload = dict(accommodation_payload, check_in_date=yesterday.isoformat())
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 400
    assert response.json()["detail"] == "Check-in cannot be in the past"


def test_blank_required_text_is_rejected(client, auth, employee, accommodation_payload):
    payload = dict(accommodation_payload, guest_name="   ")
    response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(employee))
    assert response.status_code == 422


def test_unapproved_account_cannot_book(client, auth, db, make_user, accommodation_payload):
    pending = make_user("employee", approved=False)
    response = client.post("/api/v1/bookings/accommodation", json=accommodation_payload, headers=auth(pending))
    assert response.status_code == 403
    assert db.query(Notification).count() == 0


def test_booking_requires_acting_user(client, accommodation_payload):
    response = client.post("/api/v1/bookings/accommodation", json=accommodation_payload)
    assert response.status_code == 401


def test_submit_facility(client, auth, employee, facility, facility_payload):
    payload = dict(facility_payload, facility_id=facility.id)
    response = client.post("/api/v1/bookings/facility", json=payload, headers=auth(employee))
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["stages"] == {"club_manager_approval": "pending", "md_approval": None}
    assert data["current_stage"] == "club_manager_approval"


def test_facility_end_must_follow_start(client, auth, employee, facility_payload):
    payload = dict(facility_payload, start_time="12:00:00", end_time="11:00:00")
    response = client.post("/api/v1/bookings/facility", json=payload, headers=auth(employee))
    assert response.status_code == 400


def test_unavailable_facility_is_rejected(client, auth, db, employee, facility, facility_payload):
    facility.is_available = False
    db.commit()
    payload = dict(facility_payload, facility_id=facility.id)
    response = client.post("/api/v1/bookings/facility", json=payload, headers=auth(employee))
    assert response.status_code == 400


def food_payload(menu, **overrides):
    payload = {
        "order_date": (date.today() + timedelta(days=1)).isoformat(),
        "delivery_time": "12:30:00",
        "meal_type": "lunch",
        "items": [
            {"menu_item_id": menu["pasta"].id, "quantity": 2},
            {"menu_item_id": menu["salad"].id, "quantity": 1, "notes": "no dressing"},
        ],
    }
    payload.update(overrides)
    return payload


def test_food_order_is_priced_from_menu(client, auth, employee, menu):
    response = client.post("/api/v1/bookings/food", json=food_payload(menu), headers=auth(employee))
    assert response.status_code == 201, response.text
    data = response.json()
    assert Decimal(str(data["total_amount"])) == Decimal("32.00")
    assert data["order_status"] == "received"
    assert data["stages"] == {"admin_approval": "pending"}
    assert [item["menu_item_name"] for item in data["items"]] == ["Pasta", "Salad"]


def test_food_order_needs_items(client, auth, employee, menu):
    response = client.post("/api/v1/bookings/food", json=food_payload(menu, items=[]), headers=auth(employee))
    assert response.status_code == 422


def test_food_order_meal_type_must_match(client, auth, employee, menu):
    items = [{"menu_item_id": menu["porridge"].id, "quantity": 1}]
    response = client.post("/api/v1/bookings/food", json=food_payload(menu, items=items), headers=auth(employee))
    assert response.status_code == 400
    assert "not served for lunch" in response.json()["detail"]


def test_food_order_rejects_unavailable_and_unknown_items(client, auth, employee, menu):
    items = [{"menu_item_id": menu["soup"].id, "quantity": 1}]
    response = client.post("/api/v1/bookings/food", json=food_payload(menu, items=items), headers=auth(employee))
    assert response.status_code == 400

    items = [{"menu_item_id": 999, "quantity": 1}]
    response = client.post("/api/v1/bookings/food", json=food_payload(menu, items=items), headers=auth(employee))
    assert response.status_code == 404


def test_food_order_quantity_limit(client, auth, employee, menu):
    items = [{"menu_item_id": menu["pasta"].id, "quantity": 51}]
    response = client.post("/api/v1/bookings/food", json=food_payload(menu, items=items), headers=auth(employee))
    assert response.status_code == 400


def test_my_bookings_lists_only_own(client, auth, make_user, employee, submit_accommodation):
    other = make_user("employee")
    submit_accommodation(employee)
    submit_accommodation(other)

    response = client.get("/api/v1/bookings/mine", headers=auth(employee))
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["accommodation"][0]["user_id"] == employee.id
    assert data["facility"] == [] and data["food"] == []


def test_my_bookings_filters(client, auth, employee, submit_accommodation):
    submit_accommodation(employee)
    response = client.get("/api/v1/bookings/mine", params={"status": "approved"}, headers=auth(employee))
    assert response.json()["total"] == 0
    response = client.get("/api/v1/bookings/mine", params={"type": "facility"}, headers=auth(employee))
    assert response.json()["total"] == 0
    response = client.get("/api/v1/bookings/mine", params={"type": "accommodation"}, headers=auth(employee))
    assert response.json()["total"] == 1


def test_booking_visible_to_owner_and_reviewers_only(client, auth, make_user, employee, hr, submit_accommodation):
    booking = submit_accommodation(employee)
    url = f"/api/v1/bookings/accommodation/{booking['id']}"

    assert client.get(url, headers=auth(employee)).status_code == 200
    assert client.get(url, headers=auth(hr)).status_code == 200
    assert client.get(url, headers=auth(make_user("employee"))).status_code == 403
    assert client.get("/api/v1/bookings/accommodation/999", headers=auth(hr)).status_code == 404
