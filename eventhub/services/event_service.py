"""Event service - all business logic for events lives here.

The service:
- Applies role constraints before composing list filters
- Checks read/write access before touching an event
- Keeps the bookkeeping invariants: slug uniqueness, end after start,
  version increments, ``updated_at`` and ``published_at``
- Raises typed errors from ``eventhub.core.errors``

A service instance wraps one database session and is built per request.
"""

import logging
import re
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from eventhub.core.errors import ConflictError, EventNotFoundError, StorageError, ValidationError
from eventhub.core.security import Caller
from eventhub.models import Event, EventStatus
from eventhub.schemas.event import JSON_FIELDS, EventCreate, EventQuery, EventUpdate
from eventhub.services import authorization
from eventhub.services.authorization import Operation
from eventhub.services.event_store import EventStore
from eventhub.services.filters import (
    build_filter_conditions,
    build_order_by,
    page_window,
    pagination,
)

logger = logging.getLogger(__name__)

FALLBACK_SLUG = "untitled-event"


def generate_slug(title: str) -> str:
    """Derive a URL-safe slug from a title.

    >>> generate_slug("Tech Conference 2025")
    'tech-conference-2025'
    """
    slug = title.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug or FALLBACK_SLUG


def _column_values(data: EventCreate | EventUpdate, fields: set[str]) -> dict[str, Any]:
    """Dump the given schema fields into values the Event columns accept."""
    values = {}
    for name in fields:
        value = getattr(data, name)
        if name in JSON_FIELDS and value is not None:
            value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
        values[name] = value
    return values


class EventService:
    """Service for event operations."""

    def __init__(self, store: EventStore) -> None:
        self.store = store

    # Lookups

    def find_by_id(self, event_id: UUID) -> Event | None:
        return self.store.get(event_id)

    def find_by_slug(self, slug: str) -> Event | None:
        return self.store.get_by_slug(slug)

    def get_event(self, event_id: UUID, caller: Caller | None) -> Event:
        """Return an event the caller is allowed to read.

        Raises:
            EventNotFoundError: If the event does not exist or the caller
                may not read it.
        """
        return self.verify_event_access(event_id, caller, Operation.READ)

    def verify_event_access(
        self, event_id: UUID, caller: Caller | None, operation: Operation
    ) -> Event:
        """Load an event and check ``caller`` may perform ``operation``.

        Raises:
            EventNotFoundError: If the event does not exist, or for a denied read.
            ForbiddenError: For a denied update, delete or publish.
        """
        event = self.store.get(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return authorization.check_access(event, caller, operation)

    def verify_ownership(self, event_id: UUID, organizer_id: str) -> bool:
        """Check whether ``organizer_id`` owns the event; False if it is missing."""
        event = self.store.get(event_id)
        return event is not None and authorization.is_owner(event, organizer_id)

    # Listings

    def find_many(self, query: EventQuery) -> dict[str, Any]:
        """Return one page of events matching every filter in ``query``."""
        window = page_window(query.page, query.limit)
        conditions = build_filter_conditions(query)
        rows, total = self.store.query(
            conditions, build_order_by(query), window.offset, window.limit
        )
        page_info = pagination(window, total)

        applied = query.applied_filters()
        logger.info(
            f"Events query: {len(rows)} results ({total} total) - "
            f"page {window.page}/{page_info['total_pages']}, "
            f"filters: {', '.join(applied) if applied else 'none'}"
        )
        return {"data": rows, "pagination": page_info}

    def find_public_events(self, query: EventQuery) -> dict[str, Any]:
        return self.find_many(
            query.model_copy(update=authorization.PUBLIC_CONSTRAINTS)
        )

    def find_by_organizer(self, organizer_id: str, query: EventQuery) -> dict[str, Any]:
        return self.find_many(query.model_copy(update={"organizer_id": organizer_id}))

    def find_many_with_authorization(
        self, query: EventQuery, caller: Caller | None
    ) -> dict[str, Any]:
        """List events after forcing the caller's role constraints onto ``query``."""
        constraints = authorization.list_constraints(caller)
        return self.find_many(query.model_copy(update=constraints))

    def get_query_stats(self, query: EventQuery) -> dict[str, Any]:
        total_events = self.store.count()
        filtered_events = self.store.count(build_filter_conditions(query))
        applied = query.applied_filters()

        performance = "fast"
        if not applied:
            performance = "medium"  # Full table scan
        elif "search" in applied and "status" not in applied and "category" not in applied:
            performance = "slow"
        elif filtered_events > total_events * 0.5:
            performance = "medium"

        return {
            "total_events": total_events,
            "filtered_events": filtered_events,
            "applied_filters": applied,
            "estimated_performance": performance,
        }

    # Mutations

    def create(self, data: EventCreate, caller: Caller | None) -> Event:
        """Create a draft event owned by ``caller``.

        Raises:
            UnauthorizedError: If there is no caller.
            ForbiddenError: If the caller's role may not create events.
            ConflictError: If another event already has the derived slug.
        """
        caller = authorization.require_event_creation(caller)
        slug = generate_slug(data.title)
        if self.store.slug_taken(slug):
            raise ConflictError("An event with this title already exists")

        now = datetime.now(UTC)
        event = Event(
            **_column_values(data, set(EventCreate.model_fields)),
            slug=slug,
            organizer_id=caller.user_id,
            status=EventStatus.DRAFT,
            current_attendees=0,
            version=1,
            created_at=now,
            updated_at=now,
        )
        event = self.store.insert(event)
        logger.info(f"Event created: {event.id} - {event.title}")
        return event

    def update(self, event_id: UUID, data: EventUpdate, caller: Caller | None) -> Event:
        """Apply the fields present in ``data`` and bump the version.

        Raises:
            EventNotFoundError: If the event does not exist.
            ForbiddenError: If the caller may not update it.
            ConflictError: If a new title collides with another event's slug.
            ValidationError: If the resulting dates end before they start.
        """
        existing = self.verify_event_access(event_id, caller, Operation.UPDATE)
        return self._apply_update(existing, data)

    def publish(self, event_id: UUID, caller: Caller | None) -> Event:
        """Move an event to ``published``; gated like any other write."""
        existing = self.verify_event_access(event_id, caller, Operation.PUBLISH)
        return self._apply_update(existing, EventUpdate(status=EventStatus.PUBLISHED))

    def _apply_update(self, existing: Event, data: EventUpdate) -> Event:
        values = _column_values(data, set(data.model_fields_set))

        start = values.get("start_datetime", existing.start_datetime)
        end = values.get("end_datetime", existing.end_datetime)
        if _naive_utc(end) <= _naive_utc(start):
            raise ValidationError("End date must be after start date")

        if "title" in values and values["title"] != existing.title:
            slug = generate_slug(values["title"])
            if self.store.slug_taken(slug, exclude_id=existing.id):
                raise ConflictError("An event with this title already exists")
            values["slug"] = slug

        now = datetime.now(UTC)
        status = values.get("status")
        if status == EventStatus.PUBLISHED and existing.status != EventStatus.PUBLISHED:
            if existing.published_at is None:
                values["published_at"] = now
        values["updated_at"] = now

        event = self._write(existing.id, values)
        logger.info(f"Event updated: {event.id} - {event.title} (v{event.version})")
        return event

    def delete(self, event_id: UUID, caller: Caller | None) -> Event:
        """Archive an event. The row is kept; the version is bumped.

        Archiving an already archived event changes nothing.
        """
        existing = self.verify_event_access(event_id, caller, Operation.DELETE)
        if existing.status == EventStatus.ARCHIVED:
            return existing

        event = self._write(
            event_id,
            {"status": EventStatus.ARCHIVED, "updated_at": datetime.now(UTC)},
        )
        logger.info(f"Event archived: {event.id} - {event.title} (v{event.version})")
        return event

    def _write(self, event_id: UUID, values: dict[str, Any]) -> Event:
        event = self.store.apply_update(event_id, values)
        if event is None:
            raise StorageError("Failed to update event")
        return event


def _naive_utc(value: datetime) -> datetime:
    # Stored values come back naive from SQLite; compare everything as naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value
