"""Shared test fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from eventhub.core.database import get_session
from eventhub.core.security import Caller
from eventhub.main import app
from eventhub.models import Event, EventStatus, EventVisibility, UserProfile, UserRole
from eventhub.services.event_service import EventService, generate_slug
from eventhub.services.event_store import EventStore

ORGANIZER = Caller(user_id="organizer-1", role=UserRole.ORGANIZER)
OTHER_ORGANIZER = Caller(user_id="organizer-2", role=UserRole.ORGANIZER)
ADMIN = Caller(user_id="admin-1", role=UserRole.ADMIN)
STRANGER = Caller(user_id="user-1", role=UserRole.USER)


def auth_headers(caller: Caller) -> dict[str, str]:
    return {"X-User-Id": caller.user_id, "X-User-Role": caller.role.value}


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="service")
def service_fixture(session: Session) -> EventService:
    return EventService(EventStore(session))


@pytest.fixture(name="event_payload")
def event_payload_fixture() -> Callable[..., dict[str, Any]]:
    """Build a valid create-event request body; keyword args override fields."""

    def build(**overrides: Any) -> dict[str, Any]:
        payload = {
            "title": "Tech Conference 2025",
            "description": "A full day of talks about software engineering.",
            "startDateTime": "2025-06-15T09:00:00Z",
            "endDateTime": "2025-06-15T17:00:00Z",
            "timezone": "Europe/Berlin",
            "location": {
                "type": "physical",
                "address": "1 Main Street",
                "city": "Berlin",
                "country": "Germany",
            },
            "capacity": 200,
            "images": {
                "thumbnail": "https://img.example.com/thumb.png",
                "banner": "https://img.example.com/banner.png",
            },
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture(name="make_event")
def make_event_fixture(session: Session) -> Callable[..., Event]:
    """Insert an event directly; keyword args override column values."""
    counter = iter(range(1, 10_000))

    def build(**overrides: Any) -> Event:
        n = next(counter)
        start = datetime(2025, 6, 1, 9, tzinfo=UTC) + timedelta(days=n)
        values: dict[str, Any] = {
            "title": f"Event {n}",
            "description": "An event used in tests.",
            "start_datetime": start,
            "end_datetime": start + timedelta(hours=8),
            "timezone": "UTC",
            "location": {"type": "virtual", "url": "https://meet.example.com/x"},
            "images": {
                "thumbnail": "https://img.example.com/t.png",
                "banner": "https://img.example.com/b.png",
            },
            "organizer_id": ORGANIZER.user_id,
            "status": EventStatus.PUBLISHED,
            "visibility": EventVisibility.PUBLIC,
        }
        values.update(overrides)
        values.setdefault("slug", generate_slug(values["title"]))
        event = Event(**values)
        session.add(event)
        session.commit()
        session.refresh(event)
        return event

    return build


@pytest.fixture(name="draft_private_event")
def draft_private_event_fixture(make_event) -> Event:
    """A draft, private event owned by ORGANIZER."""
    return make_event(
        title="Private Planning Session",
        status=EventStatus.DRAFT,
        visibility=EventVisibility.PRIVATE,
    )


@pytest.fixture(name="profile")
def profile_fixture(session: Session) -> UserProfile:
    profile = UserProfile(
        id=ORGANIZER.user_id,
        email="haley.carter@example.com",
        first_name="Haley",
        last_name="Carter",
        display_name="Haley Carter",
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile
