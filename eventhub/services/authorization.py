"""Role and ownership rules for events.

Everything here is a pure decision over an already-loaded event and a
caller; looking events up is the service's job. Read denials on a single
event are reported as "not found" so callers cannot probe for events they
are not allowed to see. Write denials are reported as forbidden.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from eventhub.core.errors import EventNotFoundError, ForbiddenError, UnauthorizedError
from eventhub.core.security import Caller
from eventhub.models import Event, EventStatus, EventVisibility, UserRole

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"


WRITE_OPERATIONS = frozenset({Operation.UPDATE, Operation.DELETE, Operation.PUBLISH})

ROLE_PERMISSIONS: dict[UserRole, frozenset[str]] = {
    UserRole.USER: frozenset({"event:read"}),
    UserRole.ORGANIZER: frozenset(
        {"event:create", "event:read", "event:update", "event:delete", "event:publish"}
    ),
    UserRole.ADMIN: frozenset(
        {
            "event:create",
            "event:read",
            "event:update",
            "event:delete",
            "event:publish",
            "event:moderate",
            "admin:all",
        }
    ),
}

PUBLIC_CONSTRAINTS = {
    "status": EventStatus.PUBLISHED,
    "visibility": EventVisibility.PUBLIC,
}


def has_permission(role: UserRole, permission: str) -> bool:
    granted = ROLE_PERMISSIONS.get(role, frozenset())
    return permission in granted or "admin:all" in granted


def require_permission(role: UserRole, permission: str) -> None:
    if not has_permission(role, permission):
        raise ForbiddenError(f"Access denied. Required permission: {permission}")


def require_event_creation(caller: Caller | None) -> Caller:
    """Check the caller may create events and return them."""
    if caller is None:
        raise UnauthorizedError()
    if not has_permission(caller.role, "event:create"):
        raise ForbiddenError("You do not have permission to create events")
    return caller


def is_owner(event: Event, user_id: str | None) -> bool:
    return user_id is not None and event.organizer_id == user_id


def is_publicly_visible(event: Event) -> bool:
    return (
        event.visibility == EventVisibility.PUBLIC
        and event.status == EventStatus.PUBLISHED
    )


def can_read(event: Event, caller: Caller | None) -> bool:
    if caller is not None and caller.is_admin:
        return True
    if is_publicly_visible(event):
        return True
    return caller is not None and is_owner(event, caller.user_id)


def can_write(event: Event, caller: Caller | None) -> bool:
    if caller is None:
        return False
    if caller.is_admin:
        return True
    # Owning the event is not enough: plain users never write
    return is_owner(event, caller.user_id) and caller.role == UserRole.ORGANIZER


def check_access(event: Event, caller: Caller | None, operation: Operation) -> Event:
    """Return ``event`` if ``caller`` may perform ``operation`` on it.

    Raises:
        EventNotFoundError: For a denied read.
        ForbiddenError: For a denied update, delete or publish.
    """
    who = caller.user_id if caller else "anonymous"
    if operation == Operation.READ:
        if can_read(event, caller):
            return event
        logger.debug(f"Read access denied for event {event.id} to {who}")
        raise EventNotFoundError(str(event.id))

    if operation in WRITE_OPERATIONS:
        if can_write(event, caller):
            logger.debug(f"{operation.value} access granted for event {event.id} to {who}")
            return event
        logger.info(f"{operation.value} access denied for event {event.id} to {who}")
        raise ForbiddenError(f"You do not have permission to {operation.value} this event")

    raise ForbiddenError(f"Unknown operation: {operation}")


def list_constraints(caller: Caller | None) -> dict[str, Any]:
    """Filters forced onto a listing for this caller.

    Anonymous callers and plain users only see published public events,
    organizers only see their own events, admins see everything.
    """
    if caller is None or caller.role == UserRole.USER:
        return dict(PUBLIC_CONSTRAINTS)
    if caller.role == UserRole.ORGANIZER:
        return {"organizer_id": caller.user_id}
    return {}


def filter_events_by_permission(
    events: Iterable[Event], caller: Caller | None
) -> list[Event]:
    """Keep the events ``caller`` is allowed to read."""
    return [event for event in events if can_read(event, caller)]
