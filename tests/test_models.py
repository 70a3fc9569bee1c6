"""Tests for database models."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from eventhub.models import Event, EventStatus, EventVisibility, UserProfile, UserRole


def _event(**overrides) -> Event:
    values = dict(
        slug="test-meeting",
        title="Test Meeting",
        description="Meeting description",
        start_datetime=datetime.now(UTC),
        end_datetime=datetime.now(UTC) + timedelta(hours=1),
        timezone="UTC",
        location={"type": "virtual", "url": "https://meet.example.com/abc"},
        images={"thumbnail": "https://i.example.com/t.png", "banner": "https://i.example.com/b.png"},
        organizer_id="organizer-1",
    )
    values.update(overrides)
    return Event(**values)


class TestEventModel:
    """Tests for the Event model."""

    def test_create_event_defaults(self, session: Session):
        """A new event starts as a public draft at version 1."""
        session.add(_event())
        session.commit()

        retrieved = session.exec(select(Event).where(Event.slug == "test-meeting")).first()

        assert retrieved is not None
        assert retrieved.status == EventStatus.DRAFT
        assert retrieved.visibility == EventVisibility.PUBLIC
        assert retrieved.version == 1
        assert retrieved.current_attendees == 0
        assert retrieved.published_at is None
        assert retrieved.created_at is not None

    def test_event_unique_slug(self, session: Session):
        """Two events cannot share a slug."""
        session.add(_event(title="First"))
        session.commit()

        session.add(_event(title="Second"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_missing_price_is_stored_as_null(self, session: Session):
        """An event without a price matches IS NULL, not a JSON null literal."""
        session.add(_event())
        session.add(_event(slug="paid", price={"amount": 10, "currency": "EUR", "type": "paid"}))
        session.commit()

        without_price = session.exec(select(Event).where(Event.price.is_(None))).all()
        assert [e.slug for e in without_price] == ["test-meeting"]

    def test_json_columns_round_trip(self, session: Session):
        """Location and images come back as the dicts that were stored."""
        location = {"type": "physical", "address": "1 Main Street", "city": "Oslo", "country": "Norway"}
        event = _event(location=location)
        session.add(event)
        session.commit()
        session.refresh(event)

        assert event.location == location
        assert event.images["banner"] == "https://i.example.com/b.png"
        assert event.nft_metadata is None


class TestUserProfileModel:
    """Tests for the UserProfile model."""

    def test_profile_defaults(self, profile: UserProfile):
        assert profile.role == UserRole.ORGANIZER
        assert profile.preferences["theme"] == "system"
        assert profile.preferences["email_notifications"] is True
        assert profile.last_login_at is None

    def test_profile_unique_email(self, session: Session, profile: UserProfile):
        session.add(
            UserProfile(
                id="someone-else",
                email=profile.email,
                first_name="Other",
                last_name="Person",
                display_name="Other Person",
            )
        )
        with pytest.raises(IntegrityError):
            session.commit()
