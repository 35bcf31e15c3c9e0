"""
In-memory booking store.

Stands in for the document database behind the booking API. Provides the
read-only snapshot query the availability engine consumes, plus the CRUD and
status operations the request handler needs.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from venue_booking.schemas.booking_schema import BookingRecord, BookingRequest
from venue_booking.tools.availability import Booking, BookingStatus
from venue_booking.workflow.status_machine import BookingStatusMachine, InvalidTransitionError

logger = logging.getLogger(__name__)


class BookingNotFoundError(LookupError):
    """Raised when no live booking has the given ID."""


_bookings: dict[str, BookingRecord] = {}
_lifecycles: dict[str, BookingStatusMachine] = {}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _require(booking_id: str) -> BookingRecord:
    record = _bookings.get(booking_id)
    if record is None or record.deleted:
        logger.warning("Booking not found with ID: %s", booking_id)
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return record


def create_booking(request: BookingRequest) -> BookingRecord:
    """Store a new booking request in ``pending`` status."""
    ref = f"BK-{uuid.uuid4().hex[:6].upper()}"
    record = BookingRecord(booking_id=ref, **dict(request))
    _bookings[ref] = record
    _lifecycles[ref] = BookingStatusMachine()
    logger.info(
        "New booking created with ID: %s for %s on %s",
        ref, record.venue_name, record.booking_date,
    )
    return record


def get_booking(booking_id: str) -> BookingRecord:
    """Retrieve a live booking by ID."""
    record = _require(booking_id)
    logger.debug("Booking retrieved with ID: %s", booking_id)
    return record


def get_all_bookings() -> list[BookingRecord]:
    """All live bookings in creation order."""
    bookings = [b for b in _bookings.values() if not b.deleted]
    logger.info("Retrieved all bookings - count: %d", len(bookings))
    return bookings


def get_pending_bookings() -> list[BookingRecord]:
    """Live bookings still awaiting an admin decision."""
    pending = [
        b for b in _bookings.values()
        if not b.deleted and b.status == BookingStatus.PENDING
    ]
    logger.info("Retrieved pending bookings - count: %d", len(pending))
    return pending


def update_booking(booking_id: str, request: BookingRequest) -> BookingRecord:
    """Replace the scheduling and contact details of an undecided booking.

    Raises:
        BookingNotFoundError: If the booking does not exist.
        InvalidTransitionError: If the booking was already accepted or rejected.
    """
    record = _require(booking_id)
    if record.status != BookingStatus.PENDING:
        raise InvalidTransitionError(
            f"Booking {booking_id} is already {record.status.value} and cannot be edited"
        )
    updated = record.model_copy(update={**dict(request), "updated_at": _now()})
    _bookings[booking_id] = updated
    logger.info("Booking updated with ID: %s", booking_id)
    return updated


def delete_booking(booking_id: str) -> BookingRecord:
    """Soft-delete a booking so it no longer appears in any query."""
    record = _require(booking_id)
    deleted = record.model_copy(update={"deleted": True, "updated_at": _now()})
    _bookings[booking_id] = deleted
    logger.info("Booking deleted with ID: %s", booking_id)
    return deleted


def update_booking_status(
    booking_id: str, status: BookingStatus, actor: Optional[str] = None
) -> BookingRecord:
    """Apply the admin decision.

    Raises:
        BookingNotFoundError: If the booking does not exist.
        InvalidTransitionError: If the booking was already decided.
    """
    record = _require(booking_id)
    _lifecycles[booking_id].transition(status, actor=actor)
    updated = record.model_copy(update={"status": BookingStatus(status), "updated_at": _now()})
    _bookings[booking_id] = updated
    logger.info("Booking status updated to %s for ID: %s", updated.status.value, booking_id)
    return updated


def submit_feedback(booking_id: str, feedback: str) -> BookingRecord:
    """Attach post-event feedback. Allowed in any status."""
    record = _require(booking_id)
    updated = record.model_copy(update={"feedback": feedback, "updated_at": _now()})
    _bookings[booking_id] = updated
    logger.info("Feedback submitted for booking ID: %s", booking_id)
    return updated


def get_status_history(booking_id: str) -> list[tuple[BookingStatus, datetime, Optional[str]]]:
    """Status changes for a booking as (status, when, actor) tuples."""
    _require(booking_id)
    return [(e.status, e.entered_at, e.actor) for e in _lifecycles[booking_id].get_history()]


def find_bookings_for_venue(venue_id: str, on_date: date) -> list[Booking]:
    """Snapshot of a venue's live bookings on ``on_date`` for the availability engine."""
    snapshot = [
        b.to_engine_booking()
        for b in _bookings.values()
        if not b.deleted and b.venue_id == venue_id and b.booking_date == on_date
    ]
    logger.debug("Snapshot for venue %s on %s: %d booking(s)", venue_id, on_date, len(snapshot))
    return snapshot


def reset() -> None:
    """Clear all bookings. Used by test fixtures for isolation."""
    _bookings.clear()
    _lifecycles.clear()
