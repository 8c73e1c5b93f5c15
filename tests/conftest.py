import os

os.environ["DATABASE_URL"] = "sqlite://"

import itertools
from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from app.api.dependencies import get_db, get_session_factory
from app.database.database import Base
from app.database import migration  # registers every model on the metadata
from app.database.models.users import Profile, UserRole
from app.database.models.catalog import Accommodation, Facility, MenuItem

_emails = itertools.count(1)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Insert a profile holding the given role(s)"""
    def _make(roles="employee", approved=True, third_party=False, full_name=None):
        n = next(_emails)
        if isinstance(roles, str):
            roles = [roles]
        profile = Profile(
            email=f"user{n}@example.com",
            full_name=full_name or f"User {n}",
            password_hash="not-a-real-hash",
            department="Operations",
            is_third_party=third_party,
            account_approved=approved,
        )
        db.add(profile)
        db.flush()
        for role in roles:
            db.add(UserRole(user_id=profile.id, role=role))
        db.commit()
        db.refresh(profile)
        return profile
    return _make


@pytest.fixture
def auth():
    def _headers(user):
        return {"X-User-Id": str(user.id)}
    return _headers


@pytest.fixture
def employee(make_user):
    return make_user("employee", full_name="Ada Employee")


@pytest.fixture
def hr(make_user):
    return make_user("hr_office", full_name="Harriet HR")


@pytest.fixture
def club_manager(make_user):
    return make_user("club_house_manager", full_name="Clive Manager")


@pytest.fixture
def md(make_user):
    return make_user("managing_director", full_name="Morgan Director")


@pytest.fixture
def superadmin(make_user):
    return make_user("superadmin", full_name="Sam Admin")


@pytest.fixture
def room(db):
    room = Accommodation(name="Lake View Suite", room_type="suite", capacity=2, price_per_night=Decimal("80.00"))
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@pytest.fixture
def facility(db):
    facility = Facility(name="Tennis Court", facility_type="sports", capacity=4, hourly_rate=Decimal("10.00"))
    db.add(facility)
    db.commit()
    db.refresh(facility)
    return facility


@pytest.fixture
def menu(db):
    items = {
        "pasta": MenuItem(name="Pasta", meal_type="lunch", price=Decimal("12.50")),
        "salad": MenuItem(name="Salad", meal_type="lunch", price=Decimal("7.00"), is_vegetarian=True),
        "porridge": MenuItem(name="Porridge", meal_type="breakfast", price=Decimal("4.00")),
        "soup": MenuItem(name="Soup", meal_type="lunch", price=Decimal("5.00"), is_available=False),
    }
    db.add_all(items.values())
    db.commit()
    for item in items.values():
        db.refresh(item)
    return items


@pytest.fixture
def accommodation_payload():
    check_in = date.today() + timedelta(days=7)
    return {
        "guest_name": "Grace Guest",
        "guest_address": "12 Harbour Road",
        "check_in_date": check_in.isoformat(),
        "check_out_date": (check_in + timedelta(days=2)).isoformat(),
        "purpose_of_visit": "Plant audit",
        "guests": 1,
        "billing_to": "department",
    }


@pytest.fixture
def facility_payload():
    return {
        "booking_date": (date.today() + timedelta(days=3)).isoformat(),
        "start_time": "10:00:00",
        "end_time": "12:00:00",
        "purpose": "Team tennis",
        "attendees": 4,
    }


@pytest.fixture
def submit_accommodation(client, auth, accommodation_payload):
    def _submit(user, **overrides):
        payload = dict(accommodation_payload, **overrides)
        response = client.post("/api/v1/bookings/accommodation", json=payload, headers=auth(user))
        assert response.status_code == 201, response.text
        return response.json()
    return _submit
