from eventhub.schemas.event import (
    EventCreate,
    EventPage,
    EventQuery,
    EventRead,
    EventUpdate,
    Pagination,
    QueryStats,
)
from eventhub.schemas.profile import ProfileCreate, ProfileRead, ProfileUpdate

__all__ = [
    "EventCreate",
    "EventPage",
    "EventQuery",
    "EventRead",
    "EventUpdate",
    "Pagination",
    "QueryStats",
    "ProfileCreate",
    "ProfileRead",
    "ProfileUpdate",
]
