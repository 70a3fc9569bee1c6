"""Caller identity resolved from gateway headers.

Tokens are issued and verified by the upstream auth gateway, which forwards
the authenticated user as ``X-User-Id`` and ``X-User-Role``. A request
without ``X-User-Id`` is anonymous.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Header

from eventhub.core.errors import UnauthorizedError
from eventhub.models import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    """The authenticated principal behind a request."""

    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def get_optional_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Caller | None:
    """Resolve the caller, or None for anonymous requests."""
    if not x_user_id or not x_user_id.strip():
        return None

    role = (x_user_role or UserRole.USER.value).strip().lower()
    try:
        return Caller(user_id=x_user_id.strip(), role=UserRole(role))
    except ValueError:
        logger.warning(f"Rejected request with unknown role {role!r}")
        raise UnauthorizedError("Unknown user role") from None


def get_caller(caller: Caller | None = Depends(get_optional_caller)) -> Caller:
    """Resolve the caller, rejecting anonymous requests."""
    if caller is None:
        raise UnauthorizedError()
    return caller
