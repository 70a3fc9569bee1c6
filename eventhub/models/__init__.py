from eventhub.models.event import Event, EventStatus, EventVisibility
from eventhub.models.profile import UserProfile, UserRole

__all__ = ["Event", "EventStatus", "EventVisibility", "UserProfile", "UserRole"]
