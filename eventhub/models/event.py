"""Event model, the central record of the application.

This module defines the Event table together with the status and visibility
enumerations. Structured parts of an event (location, price, images and the
optional wallet/NFT association) are stored as JSON columns; their shapes are
validated by the schemas in ``eventhub.schemas.event`` before they reach the
database.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, Index
from sqlmodel import Field, SQLModel


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class EventVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


def utcnow() -> datetime:
    return datetime.now(UTC)


class Event(SQLModel, table=True):
    """An event owned by exactly one organizer.

    Events are never physically deleted: deleting one moves it to the
    ``archived`` status. Every successful mutation bumps ``version`` through
    an atomic SQL increment, so concurrent writers cannot lose each other's
    updates.

    Attributes:
        id: Unique identifier (UUID).
        slug: URL-safe identifier derived from the title (unique).
        title: Display title, 3 to 200 characters.
        description: Long description.
        excerpt: Optional short summary shown in listings.
        start_datetime: When the event starts (UTC).
        end_datetime: When the event ends (UTC), strictly after the start.
        timezone: IANA timezone the event is held in, e.g. "Europe/Berlin".
        location: JSON, either ``{"type": "physical", address, city,
            country, coordinates?}`` or ``{"type": "virtual", url, platform?}``.
        capacity: Optional maximum number of attendees.
        current_attendees: Attendee count, initialised to 0.
        status: Lifecycle status, see ``EventStatus``.
        visibility: Who may discover the event, see ``EventVisibility``.
        organizer_id: Owner of the event; immutable after creation.
        category_id: Optional category reference.
        price: Optional JSON ``{amount, currency, type}``; NULL means free.
        images: JSON ``{thumbnail, banner, gallery?}``.
        nft_metadata: Optional wallet/NFT association; NULL when none.
        version: Mutation counter, starts at 1.
        created_at: Creation timestamp, never changed.
        updated_at: Timestamp of the last mutation.
        published_at: Set the first time the event enters ``published``.
    """
    __table_args__ = (
        Index("idx_status_start", "status", "start_datetime"),
        Index("idx_organizer_created", "organizer_id", "created_at"),
        Index("idx_category_status", "category_id", "status"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(max_length=200, unique=True, index=True)
    title: str = Field(max_length=200)
    description: str
    excerpt: str | None = Field(default=None, max_length=300)
    start_datetime: datetime = Field(index=True)
    end_datetime: datetime = Field(index=True)
    timezone: str = Field(max_length=50)
    location: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    capacity: int | None = None
    current_attendees: int = Field(default=0)
    status: EventStatus = Field(default=EventStatus.DRAFT)
    visibility: EventVisibility = Field(default=EventVisibility.PUBLIC, index=True)
    organizer_id: str = Field(max_length=36)
    category_id: str | None = Field(default=None, max_length=36)
    price: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON(none_as_null=True), nullable=True)
    )
    images: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    nft_metadata: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON(none_as_null=True), nullable=True)
    )
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    published_at: datetime | None = None
