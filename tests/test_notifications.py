import itertools
import json

import pytest

from app.database.services.notification_service import NotificationService
from app.ReqResModels.notificationmodels import FeedEvent, NotificationResponse


@pytest.fixture
def inbox(db, employee):
    """Three notifications for the employee, oldest first"""
    notes = [
        NotificationService.add_notification(db, employee.id, "Food Order Placed", "Order placed", "booking_submitted"),
        NotificationService.add_notification(db, employee.id, "Role Updated", "New role", "role_assignment"),
        NotificationService.add_notification(db, employee.id, "Account Approved", "Welcome", "account_approval", "/dashboard"),
    ]
    db.commit()
    for note in notes:
        db.refresh(note)
    return notes


def test_add_notification_does_not_commit(db, session_factory, employee):
    NotificationService.add_notification(db, employee.id, "Title", "Body", "booking_submitted")
    other = session_factory()
    try:
        assert NotificationService.get_unread_count(other, employee.id).unread == 0
    finally:
        other.close()
    db.rollback()


def test_list_and_unread_count(client, auth, employee, inbox):
    data = client.get("/api/v1/notifications/", headers=auth(employee)).json()
    assert data["total"] == 3
    assert data["unread"] == 3
    assert {n["title"] for n in data["notifications"]} == {"Food Order Placed", "Role Updated", "Account Approved"}

    count = client.get("/api/v1/notifications/unread-count", headers=auth(employee)).json()
    assert count == {"unread": 3}


def test_mark_as_read(client, auth, employee, inbox):
    response = client.put(f"/api/v1/notifications/{inbox[0].id}/read", headers=auth(employee))
    assert response.status_code == 200
    assert response.json()["is_read"] is True

    data = client.get("/api/v1/notifications/", params={"unread_only": True}, headers=auth(employee)).json()
    assert data["total"] == 2
    assert data["unread"] == 2


def test_mark_all_as_read(client, auth, employee, inbox):
    response = client.put("/api/v1/notifications/read-all", headers=auth(employee))
    assert response.json()["updated"] == 3
    assert client.get("/api/v1/notifications/unread-count", headers=auth(employee)).json()["unread"] == 0


def test_delete_notification(client, auth, employee, inbox):
    response = client.delete(f"/api/v1/notifications/{inbox[1].id}", headers=auth(employee))
    assert response.status_code == 200
    assert client.get("/api/v1/notifications/", headers=auth(employee)).json()["total"] == 2
    assert client.delete(f"/api/v1/notifications/{inbox[1].id}", headers=auth(employee)).status_code == 404


def test_other_users_notifications_are_hidden(client, auth, make_user, inbox):
    stranger = make_user("employee")
    assert client.put(f"/api/v1/notifications/{inbox[0].id}/read", headers=auth(stranger)).status_code == 404
    assert client.delete(f"/api/v1/notifications/{inbox[0].id}", headers=auth(stranger)).status_code == 404
    assert client.get("/api/v1/notifications/", headers=auth(stranger)).json()["total"] == 0


def test_feed_is_ordered_and_flags_invalidation(client, auth, employee, inbox):
    feed = client.get("/api/v1/notifications/feed", headers=auth(employee)).json()
    assert [e["notification"]["id"] for e in feed["events"]] == [n.id for n in inbox]
    assert [e["invalidate"] for e in feed["events"]] == [[], ["roles", "profile"], ["roles", "profile"]]
    assert feed["last_id"] == inbox[-1].id
    assert feed["unread"] == 3


def test_feed_resumes_after_last_seen(client, auth, employee, inbox):
    feed = client.get("/api/v1/notifications/feed", params={"after_id": inbox[1].id}, headers=auth(employee)).json()
    assert [e["notification"]["id"] for e in feed["events"]] == [inbox[2].id]

    empty = client.get("/api/v1/notifications/feed", params={"after_id": inbox[2].id}, headers=auth(employee)).json()
    assert empty["events"] == []
    assert empty["last_id"] == inbox[2].id


def test_format_sse(inbox):
    event = FeedEvent(notification=NotificationResponse.model_validate(inbox[1]), invalidate=["roles", "profile"])
    frame = NotificationService.format_sse(event)
    lines = frame.split("\n")
    assert lines[0] == f"id: {inbox[1].id}"
    assert lines[1] == "event: invalidate"
    assert json.loads(lines[2][len("data: "):])["notification"]["title"] == "Role Updated"
    assert frame.endswith("\n\n")

    plain = FeedEvent(notification=NotificationResponse.model_validate(inbox[0]), invalidate=[])
    assert "event: notification\n" in NotificationService.format_sse(plain)


def test_stream_events_sends_new_notifications_then_keep_alive(session_factory, employee, inbox):
    frames = NotificationService.stream_events(session_factory, employee.id, inbox[0].id, poll_seconds=0)
    try:
        first = next(frames)
        assert first.startswith(f"id: {inbox[1].id}\nevent: invalidate\n")
        assert next(frames).startswith(f"id: {inbox[2].id}\n")
        assert next(frames) == ": keep-alive\n\n"
    finally:
        frames.close()


def test_stream_endpoint_resumes_from_last_event_id(client, auth, employee, inbox, monkeypatch):
    stream_events = NotificationService.stream_events
    monkeypatch.setattr(
        NotificationService,
        "stream_events",
        staticmethod(lambda *args, **kwargs: itertools.islice(stream_events(*args, **kwargs), 1)),
    )
    headers = dict(auth(employee), **{"Last-Event-ID": str(inbox[0].id)})
    response = client.get("/api/v1/notifications/stream", headers=headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    lines = response.text.split("\n")
    assert lines[0] == f"id: {inbox[1].id}"
    assert lines[1] == "event: invalidate"
    assert json.loads(lines[2][len("data: "):])["notification"]["type"] == "role_assignment"
