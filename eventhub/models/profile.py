"""User profile model backing the profile page.

Profiles are keyed by the same opaque user id the auth gateway forwards in
``X-User-Id``, so an organizer's events and profile share one identifier.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from eventhub.models.event import utcnow


class UserRole(str, Enum):
    USER = "user"
    ORGANIZER = "organizer"
    ADMIN = "admin"


def default_preferences() -> dict[str, Any]:
    return {
        "email_notifications": True,
        "theme": "system",
        "timezone": "UTC",
        "language": "en",
    }


class UserProfile(SQLModel, table=True):
    """Public-facing profile of a user.

    Attributes:
        id: User id as issued by the auth gateway.
        email: Contact address (unique).
        first_name: Given name.
        last_name: Family name.
        display_name: Name shown in the UI, defaults to "first last".
        profile_picture: Optional avatar URL.
        role: Role of the user, see ``UserRole``.
        bio: Optional free text.
        organization: Optional organization the user belongs to.
        website: Optional homepage URL.
        social_links: Optional mapping of network name to URL.
        preferences: UI and notification preferences.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last change.
        last_login_at: Timestamp of the last sign-in, if known.
    """
    __tablename__ = "user_profiles"

    id: str = Field(primary_key=True, max_length=36)
    email: str = Field(max_length=255, unique=True, index=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    display_name: str = Field(max_length=200, index=True)
    profile_picture: str | None = Field(default=None, max_length=500)
    role: UserRole = Field(default=UserRole.ORGANIZER, index=True)
    bio: str | None = None
    organization: str | None = Field(default=None, max_length=200)
    website: str | None = Field(default=None, max_length=500)
    social_links: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON(none_as_null=True), nullable=True)
    )
    preferences: dict[str, Any] = Field(
        default_factory=default_preferences, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login_at: datetime | None = None
