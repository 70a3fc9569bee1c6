"""Persistence operations for events.

The store is the only code that talks to the database about events. It
knows nothing about callers or roles; it offers keyed lookups, a predicate
query with a matching count, inserts and partial updates. Database
failures are logged, the session is rolled back and a ``StorageError`` is
raised in their place.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import ColumnElement
from sqlmodel import Session, select

from eventhub.core.database import is_unique_violation
from eventhub.core.errors import ConflictError, StorageError
from eventhub.models import Event

logger = logging.getLogger(__name__)


class EventStore:
    """SQL-backed store for ``Event`` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _storage(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.session.rollback()
            if is_unique_violation(e, "slug"):
                logger.warning(f"Duplicate slug while trying to {action}: {e.orig}")
                raise ConflictError("An event with this title already exists") from e
            logger.error(f"Integrity error while trying to {action}: {e.orig}")
            raise StorageError(f"Failed to {action}") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error while trying to {action}: {e}")
            raise StorageError(f"Failed to {action}") from e

    def get(self, event_id: UUID) -> Event | None:
        with self._storage("retrieve event"):
            return self.session.get(Event, event_id)

    def get_by_slug(self, slug: str) -> Event | None:
        with self._storage("retrieve event"):
            return self.session.exec(select(Event).where(Event.slug == slug)).first()

    def slug_taken(self, slug: str, exclude_id: UUID | None = None) -> bool:
        """Check whether another event already uses ``slug``."""
        statement = select(Event.id).where(Event.slug == slug)
        if exclude_id is not None:
            statement = statement.where(Event.id != exclude_id)
        with self._storage("check slug"):
            return self.session.exec(statement.limit(1)).first() is not None

    def count(self, conditions: Sequence[ColumnElement[bool]] = ()) -> int:
        statement = select(func.count()).select_from(Event).where(*conditions)
        with self._storage("count events"):
            return self.session.exec(statement).one()

    def query(
        self,
        conditions: Sequence[ColumnElement[bool]],
        order_by: Sequence[Any],
        offset: int,
        limit: int,
    ) -> tuple[list[Event], int]:
        """Return one page of matching events and the total match count.

        Both statements share ``conditions`` so the page and the total
        always describe the same result set.
        """
        statement = (
            select(Event)
            .where(*conditions)
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
        )
        with self._storage("retrieve events"):
            rows = list(self.session.exec(statement).all())
        return rows, self.count(conditions)

    def insert(self, event: Event) -> Event:
        with self._storage("create event"):
            self.session.add(event)
            self.session.commit()
            self.session.refresh(event)
        return event

    def apply_update(self, event_id: UUID, values: dict[str, Any]) -> Event | None:
        """Write ``values`` to one row and bump its version in the same UPDATE.

        The increment happens in SQL, so two writers racing on the same row
        each add exactly one to the version.
        """
        statement = (
            update(Event)
            .where(Event.id == event_id)
            .values(**values, version=Event.version + 1)
            .execution_options(synchronize_session=False)
        )
        with self._storage("update event"):
            self.session.exec(statement)
            # Commit expires the identity map, so the get below reloads the row
            self.session.commit()
            return self.session.get(Event, event_id)
