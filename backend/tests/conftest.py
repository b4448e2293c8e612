import os
from datetime import date, time, timedelta

# Configure before the app modules read their environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_webhook_secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models
from database import Base, get_db
from main import app
from security import hash_password, create_access_token

DEFAULT_PASSWORD = "password123"


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
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """auth(user) -> Authorization header for that user's session token."""
    def _auth(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _auth


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(account_type="attendee", is_admin=False, email=None, **extra):
        counter["n"] += 1
        user = models.User(
            first_name    = extra.pop("first_name", "Test"),
            last_name     = extra.pop("last_name", f"User{counter['n']}"),
            email         = email or f"user{counter['n']}@example.com",
            password_hash = hash_password(DEFAULT_PASSWORD),
            account_type  = account_type,
            is_admin      = is_admin,
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user(account_type="organizer", is_admin=True, email="admin@example.com")


@pytest.fixture
def organizer(make_user):
    return make_user(account_type="organizer", email="organizer@example.com")


@pytest.fixture
def attendee(make_user):
    return make_user(account_type="attendee", email="attendee@example.com")


@pytest.fixture
def make_event(db, organizer):
    counter = {"n": 0}

    def _make_event(**overrides):
        counter["n"] += 1
        fields = dict(
            slug          = f"event-{counter['n']}",
            organizer_id  = organizer.id,
            title         = f"Event {counter['n']}",
            description   = "A test event",
            category      = "community",
            event_date    = date.today() + timedelta(days=30),
            start_time    = time(18, 0),
            end_time      = time(21, 0),
            event_type    = "virtual",
            ticket_type   = "free",
            ticket_price  = None,
            total_tickets = 10,
            tickets_sold  = 0,
            platform_fee_percent = 8.0,
            fee_bearer    = "organizer",
        )
        fields.update(overrides)
        event = models.Event(**fields)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event
