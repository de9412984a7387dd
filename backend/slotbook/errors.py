"""
Domain errors and their HTTP rendering.

Every error maps 1:1 to a terse user-facing message; storage driver details
stay in the logs.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# User-facing messages
# ---------------------------------------------------------------------------

MSG_INVALID_REQUEST = "Invalid request"
MSG_DUPLICATE_BOOKING = "You have already booked this slot"
MSG_SLOT_FULL = "Sorry, this slot is fully booked!"
MSG_SLOT_JUST_FILLED = "Sorry, this slot just got fully booked!"
MSG_SERVER_ERROR = "Server error"
MSG_NOT_FOUND = "Not found"
MSG_UNAUTHORIZED = "Unauthorized"
MSG_RATE_LIMITED = "Too many requests. Please slow down."

# Pydantic error type whose msg is safe to show as-is
INVALID_INPUT = "invalid_input"


class DomainError(Exception):
    """Base for errors that are rendered to callers as {"error": message}."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = MSG_SERVER_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidSpecification(DomainError):
    """Bad or missing scheduling/booking input. Detected before any mutation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = MSG_INVALID_REQUEST


class DuplicateBooking(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = MSG_DUPLICATE_BOOKING


class SlotFull(DomainError):
    """Capacity exhausted. Clients refresh and reselect rather than retry."""

    status_code = status.HTTP_409_CONFLICT
    default_message = MSG_SLOT_FULL


class PersistenceError(DomainError):
    """Storage fault. The message is always the generic one."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = MSG_SERVER_ERROR


class NotificationError(DomainError):
    """Outbound notification failed. Swallowed by the dispatcher, never rendered."""


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = MSG_NOT_FOUND


class AuthenticationError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = MSG_UNAUTHORIZED


class RateLimited(DomainError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = MSG_RATE_LIMITED


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        # Public message stays generic; the cause is only logged
        logger.error(
            "Persistence error on %s %s: %s",
            request.method, request.url.path, exc.__cause__ or exc.details,
        )
        return error_response(exc.status_code, MSG_SERVER_ERROR)
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.info("Rejected invalid request %s %s: %s", request.method, request.url.path, errors)

    # Field checks that carry their own message win over the generic one
    message = next(
        (e["msg"] for e in errors if e.get("type") == INVALID_INPUT),
        MSG_INVALID_REQUEST,
    )
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else MSG_INVALID_REQUEST
    return error_response(exc.status_code, message)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
