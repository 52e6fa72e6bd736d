import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "schooltrips-test-secret-key-0123456789abcdef")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from schooltrips.auth.utils import create_access_token, get_password_hash
from schooltrips.clock import FixedClock, get_clock
from schooltrips.config import settings
from schooltrips.database import Base, SessionLocal, engine
from schooltrips.main import app
from schooltrips.models import Trip, User

API = settings.API_V1_STR
PASSWORD = "Password123!"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def client(db_session, clock):
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db, name, email, role="client", school=None):
    user = User(name=name, email=email, password=PASSWORD_HASH, role=role, school=school, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _make_user(db_session, "Platform Admin", "admin@schooltrips.io", role="admin")


@pytest.fixture
def school_user(db_session):
    return _make_user(db_session, "Sarah Johnson", "sarah@greenviewschool.org", school="Greenview High School")


@pytest.fixture
def other_school_user(db_session):
    return _make_user(db_session, "Mark Thompson", "mark@stpeterscollege.edu", school="St Peter's College")


def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def school_headers(school_user):
    return auth_headers(school_user)


@pytest.fixture
def other_school_headers(other_school_user):
    return auth_headers(other_school_user)


@pytest.fixture
def paris_trip(db_session):
    trip = Trip(
        title="Discover Paris & Versailles",
        slug="discover-paris-versailles",
        destination="Paris",
        country="France",
        duration_days=5,
        base_per_student=Decimal("85"),
        base_per_adult=Decimal("110"),
        meal_per_person_per_day=Decimal("18"),
        transport_surcharge={"bus": 25, "train": 40},
        extras={"Museum Pass": 28},
        available_transport=["bus", "train"],
        available_extras={"Disneyland Day": 65},
        is_active=True,
    )
    db_session.add(trip)
    db_session.commit()
    db_session.refresh(trip)
    return trip


@pytest.fixture
def paris_request(paris_trip):
    """The reference configuration: 20 students, 2 adults, train, museum pass"""
    return {
        "trip_id": paris_trip.id,
        "students": 20,
        "adults": 2,
        "start_date": "2025-06-01",
        "meals_per_day": 2,
        "transport_type": "train",
        "selected_extras": ["Museum Pass"],
    }
