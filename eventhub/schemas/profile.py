"""Pydantic schemas for the profile endpoints."""

from datetime import datetime
from typing import Any

from pydantic import AnyHttpUrl, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from eventhub.models.profile import UserRole
from eventhub.schemas.event import CamelModel, _as_utc


class ProfileCreate(CamelModel):
    id: str = Field(min_length=1, max_length=36)
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    display_name: str | None = Field(default=None, max_length=200)
    role: UserRole = UserRole.ORGANIZER
    preferences: dict[str, Any] | None = None


# Profile columns that are NOT NULL; a PUT may omit them but not null them.
PROFILE_REQUIRED_ON_UPDATE = ("first_name", "last_name", "display_name", "preferences")


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    display_name: str | None = Field(default=None, min_length=1, max_length=200)
    profile_picture: AnyHttpUrl | None = None
    bio: str | None = Field(default=None, max_length=2000)
    organization: str | None = Field(default=None, max_length=200)
    website: AnyHttpUrl | None = None
    social_links: dict[str, str] | None = None
    preferences: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_required(self) -> "ProfileUpdate":
        for name in PROFILE_REQUIRED_ON_UPDATE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ProfileRead(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    email: str
    first_name: str
    last_name: str
    display_name: str
    profile_picture: str | None
    role: UserRole
    bio: str | None
    organization: str | None
    website: str | None
    social_links: dict[str, Any] | None
    preferences: dict[str, Any]
    initials: str
    avatar_color: str
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None

    @field_validator("created_at", "updated_at", "last_login_at")
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value) if value is not None else None
