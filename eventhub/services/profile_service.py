"""User profile service backing the profile page."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from eventhub.core.database import is_unique_violation
from eventhub.core.errors import ConflictError, NotFoundError, StorageError
from eventhub.models import UserProfile
from eventhub.models.profile import default_preferences
from eventhub.schemas.profile import ProfileCreate, ProfileUpdate

logger = logging.getLogger(__name__)

AVATAR_COLORS = (
    "#3b82f6",  # blue
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#f59e0b",  # amber
    "#10b981",  # green
    "#06b6d4",  # cyan
)


def initials(display_name: str) -> str:
    """First letters of the first two words, e.g. "Haley Carter" -> "HC"."""
    return "".join(part[0] for part in display_name.split()).upper()[:2]


def avatar_color(user_id: str) -> str:
    """Pick a stable avatar colour for a user id."""
    return AVATAR_COLORS[sum(ord(char) for char in user_id) % len(AVATAR_COLORS)]


class UserProfileService:
    """Service for reading and editing user profiles."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_id(self, user_id: str) -> UserProfile | None:
        return self.session.get(UserProfile, user_id)

    def find_by_email(self, email: str) -> UserProfile | None:
        return self.session.exec(
            select(UserProfile).where(UserProfile.email == email)
        ).first()

    def get(self, user_id: str) -> UserProfile:
        profile = self.find_by_id(user_id)
        if profile is None:
            raise NotFoundError("Profile")
        return profile

    def create(self, data: ProfileCreate) -> UserProfile:
        profile = UserProfile(
            **data.model_dump(exclude={"display_name", "preferences"}),
            display_name=data.display_name or f"{data.first_name} {data.last_name}",
            preferences=data.preferences or default_preferences(),
        )
        self._commit(profile, "create profile")
        logger.info(f"Profile created: {profile.id} ({profile.email})")
        return profile

    def update(self, user_id: str, data: ProfileUpdate) -> UserProfile:
        """Apply the fields present in ``data`` to the profile."""
        profile = self.get(user_id)
        for name, value in data.model_dump(mode="json", exclude_unset=True).items():
            setattr(profile, name, value)
        profile.updated_at = datetime.now(UTC)
        self._commit(profile, "update profile")
        return profile

    def update_profile_picture(self, user_id: str, picture_url: str) -> UserProfile:
        profile = self.get(user_id)
        profile.profile_picture = picture_url
        profile.updated_at = datetime.now(UTC)
        self._commit(profile, "update profile picture")
        return profile

    def update_last_login(self, user_id: str) -> None:
        profile = self.get(user_id)
        profile.last_login_at = datetime.now(UTC)
        self._commit(profile, "record login")

    def delete(self, user_id: str) -> None:
        profile = self.get(user_id)
        try:
            self.session.delete(profile)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete profile {user_id}: {e}")
            raise StorageError("Failed to delete profile") from e

    def to_read_data(self, profile: UserProfile) -> dict[str, Any]:
        """Profile fields plus the derived avatar attributes."""
        return {
            **profile.model_dump(),
            "initials": initials(profile.display_name),
            "avatar_color": avatar_color(profile.id),
        }

    def _commit(self, profile: UserProfile, action: str) -> None:
        try:
            self.session.add(profile)
            self.session.commit()
            self.session.refresh(profile)
        except IntegrityError as e:
            self.session.rollback()
            if is_unique_violation(e, "email"):
                raise ConflictError("A profile with this email already exists") from e
            logger.error(f"Integrity error while trying to {action}: {e.orig}")
            raise StorageError(f"Failed to {action}") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StorageError(f"Failed to {action}") from e
