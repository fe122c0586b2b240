"""
Application error hierarchy and FastAPI handlers.

Every HTTP error carries a machine-readable `code` and is rendered as
`{"error": {"code", "message", "details"?}}`. Per-operation sync failures are
not HTTP errors: they travel inside the 200 sync response (see `OpFailure`).
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# Per-operation sync codes
INVALID_PAYLOAD = "INVALID_PAYLOAD"
HABIT_NOT_FOUND = "HABIT_NOT_FOUND"
UNKNOWN_OP_TYPE = "UNKNOWN_OP_TYPE"
HABIT_ID_CONFLICT = "HABIT_ID_CONFLICT"
APPLY_FAILED = "APPLY_FAILED"

# Failures that can never succeed under the same op id.
PERMANENT_OP_CODES = frozenset({INVALID_PAYLOAD, UNKNOWN_OP_TYPE, HABIT_ID_CONFLICT})


class HabitSyncError(Exception):
    """Base class for request-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return {"error": payload}


class RequestValidationFailed(HabitSyncError):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class BatchTooLargeError(RequestValidationFailed):
    def __init__(self, max_ops: int, received: int):
        super().__init__(
            message=f"Batch exceeds maximum size of {max_ops} ops. Received {received}.",
            details={"max_ops": max_ops, "received": received},
        )


class HabitNotFoundError(HabitSyncError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, habit_id: str):
        super().__init__(message="Habit not found", details={"habit_id": habit_id})


class AuthenticationError(HabitSyncError):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class InactiveUserError(HabitSyncError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self):
        super().__init__(message="User is inactive")


class AuthNotConfiguredError(HabitSyncError):
    code = "AUTH_NOT_CONFIGURED"

    def __init__(self):
        super().__init__(message="Server auth is not configured")


class OpFailure(Exception):
    """Raised inside the sync apply loop; becomes one `failed` entry."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def habitsync_exception_handler(request: Request, exc: HabitSyncError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests are rejected as a whole before any work happens."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Validation failed",
                "details": {"errors": field_errors},
            }
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred."}},
    )
