"""Application error codes and the typed error hierarchy.

Services raise these errors; the HTTP layer maps each ``ErrorCode`` to a
status code and a JSON error envelope. Messages are user-safe: storage
details travel on ``__cause__`` and in the logs, never in ``message``.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes exposed to API clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 500,
}


class AppError(Exception):
    """Base error with a stable code and a user-safe message."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(AppError):
    """Raised when a resource is absent or must look absent to the caller."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class EventNotFoundError(NotFoundError):
    """Raised when an event does not exist or the caller may not see it."""

    def __init__(self, event_id: str) -> None:
        super().__init__("Event")
        self.event_id = event_id


class ForbiddenError(AppError):
    code = ErrorCode.FORBIDDEN


class UnauthorizedError(AppError):
    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ConflictError(AppError):
    code = ErrorCode.CONFLICT


class ValidationError(AppError):
    """Raised when input passes schema validation but breaks an invariant."""

    code = ErrorCode.VALIDATION_ERROR


class StorageError(AppError):
    """Raised when the database fails underneath a service call."""

    code = ErrorCode.DATABASE_ERROR
