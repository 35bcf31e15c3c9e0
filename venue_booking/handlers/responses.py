"""Handler response type and the mapping from domain errors to status codes."""

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError

from venue_booking.handlers.admin_guard import AdminAuthorizationError
from venue_booking.tools.availability import AvailabilityError, InconsistentBookingSet
from venue_booking.tools.booking import BookingNotFoundError
from venue_booking.tools.venue import DuplicateVenueError, VenueNotFoundError
from venue_booking.workflow.status_machine import InvalidTransitionError

logger = logging.getLogger(__name__)

HANDLED_ERRORS = (
    ValidationError,
    AvailabilityError,
    AdminAuthorizationError,
    BookingNotFoundError,
    VenueNotFoundError,
    DuplicateVenueError,
    InvalidTransitionError,
)


@dataclass
class HandlerResponse:
    """JSON-shaped result of a handler call."""

    status_code: int
    body: Union[dict[str, Any], list[Any]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def validation_error_response(exc: ValidationError) -> HandlerResponse:
    """400 response naming the first engine error found, if any."""
    code = "ValidationError"
    details = []
    for err in exc.errors():
        cause = err.get("ctx", {}).get("error")
        if isinstance(cause, AvailabilityError) and code == "ValidationError":
            code = type(cause).__name__
        details.append({
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
        })
    return HandlerResponse(400, {"error": code, "details": details})


def error_response(exc: Exception) -> HandlerResponse:
    """Translate a handled domain error into a response."""
    if isinstance(exc, ValidationError):
        return validation_error_response(exc)
    if isinstance(exc, InconsistentBookingSet):
        logger.error("Inconsistent booking data: %s", exc)
        return HandlerResponse(500, {"error": "InconsistentBookingSet", "message": str(exc)})
    if isinstance(exc, AvailabilityError):
        return HandlerResponse(400, {"error": type(exc).__name__, "message": str(exc)})
    if isinstance(exc, AdminAuthorizationError):
        return HandlerResponse(exc.status_code, {"message": str(exc)})
    if isinstance(exc, (BookingNotFoundError, VenueNotFoundError)):
        return HandlerResponse(404, {"error": "NotFound", "message": str(exc)})
    if isinstance(exc, (InvalidTransitionError, DuplicateVenueError)):
        return HandlerResponse(409, {"error": type(exc).__name__, "message": str(exc)})
    raise exc
