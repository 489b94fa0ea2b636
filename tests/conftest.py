"""
Pytest configuration and fixtures.
Every test runs against a fresh in-memory SQLite database, never the configured one.
"""

import os
from datetime import date
from decimal import Decimal

import pytest

# Must be set BEFORE importing the application
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_NOTIFICATION_EMAIL_ENABLE"] = "false"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hotel_portal.db import Base, get_db
from hotel_portal.main import app
from hotel_portal.models import User, UserRole, Room, RoomStatus, Reservation, ReservationStatus
from hotel_portal.security import hash_password, issue_token

PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """Test client whose requests use the test database."""

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, name, email, role, is_active=True):
    user = User(name=name, email=email, password_hash=hash_password(PASSWORD), role=role, is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "Front Desk", "admin@hotel.test", UserRole.ADMIN)


@pytest.fixture
def guest_user(db):
    return _make_user(db, "Grace Guest", "grace@hotel.test", UserRole.GUEST)


@pytest.fixture
def make_user(db):
    def _factory(name="Another Guest", email="another@hotel.test", role=UserRole.GUEST, is_active=True):
        return _make_user(db, name, email, role, is_active)
    return _factory


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {issue_token(admin_user)}"}


@pytest.fixture
def guest_headers(guest_user):
    return {"Authorization": f"Bearer {issue_token(guest_user)}"}


@pytest.fixture
def make_room(db):
    def _factory(number="101", price="120.00", status=RoomStatus.AVAILABLE, room_type="DOUBLE"):
        room = Room(
            number=number,
            type=room_type,
            price=Decimal(price),
            capacity=2,
            status=status,
            available=status == RoomStatus.AVAILABLE,
        )
        db.add(room)
        db.commit()
        db.refresh(room)
        return room
    return _factory


@pytest.fixture
def make_reservation(db):
    """Insert a reservation row directly, bypassing the lifecycle rules."""
    def _factory(user, room, check_in: date, check_out: date, status=ReservationStatus.CONFIRMED):
        reservation = Reservation(user_id=user.id, room_id=room.id, check_in=check_in, check_out=check_out, status=status)
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation
    return _factory
