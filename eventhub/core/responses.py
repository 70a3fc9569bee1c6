"""Standardized JSON response envelopes."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from eventhub.core.errors import AppError, ErrorCode, STATUS_CODES


def success_response(data: Any = None, message: str = "OK", status_code: int = 200) -> JSONResponse:
    """Wrap ``data`` as ``{"success": true, "message": ..., "data": ...}``."""
    return JSONResponse(
        content=jsonable_encoder(
            {"success": True, "message": message, "data": data}, by_alias=True
        ),
        status_code=status_code,
    )


def error_response(
    message: str,
    code: ErrorCode,
    details: Any = None,
    status_code: int | None = None,
) -> JSONResponse:
    """Build the error envelope; the status defaults to the code's mapping."""
    content: dict[str, Any] = {"success": False, "error": message, "code": code.value}
    if details is not None:
        content["details"] = details
    return JSONResponse(
        content=jsonable_encoder(content),
        status_code=status_code or STATUS_CODES[code],
    )


def app_error_response(error: AppError) -> JSONResponse:
    return error_response(error.message, error.code, error.details, error.status_code)


def validation_details(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``{"field", "message"}`` pairs."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": str(error.get("msg", "Invalid value")),
        }
        for error in errors
    ]
