"""
Venue availability engine.

Classifies a requested time window against a snapshot of a venue's existing
bookings for the same date:

* blocked: overlaps an accepted booking (hard conflict, always wins)
* contested: overlaps only pending requests (still available, contention surfaced)
* free: no overlap; bookings within the advisory buffer are listed as nearby

The engine is a pure function. It never mutates the bookings it is given and
never touches storage; the caller supplies the snapshot.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Union

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_MINUTES = 60
BLOCKED_BY_ACCEPTED_BOOKING = "blocked-by-accepted-booking"

# 24-hour first, then the 12-hour spellings seen in booking forms
_TIME_FORMATS = ("%H:%M", "%I:%M %p", "%I:%M%p", "%I %p", "%I%p")
_MINUTE_PART = re.compile(r":(\d+)")
MINUTES_PER_DAY = 24 * 60


class BookingStatus(str, Enum):
    """Lifecycle status of a booking request."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class AvailabilityError(ValueError):
    """Base class for availability check failures."""


class InvalidTimeFormat(AvailabilityError):
    """Start time could not be parsed into hour:minute."""


class InvalidDateFormat(AvailabilityError):
    """Booking date could not be parsed into a calendar date."""


class InvalidDuration(AvailabilityError):
    """Duration is zero, negative, or not a whole number of minutes."""


class InconsistentBookingSet(AvailabilityError):
    """An existing booking has an unknown status or belongs to another venue/date."""


def parse_start_time(value: Union[str, time]) -> time:
    """Normalize a 24-hour (``14:30``) or 12-hour (``2:30 PM``) start time.

    Raises:
        InvalidTimeFormat: If the value is not a recognizable wall-clock time.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimeFormat(f"Invalid start time: {value!r}")

    text = " ".join(value.strip().upper().split())
    minutes = _MINUTE_PART.search(text)
    if minutes and len(minutes.group(1)) != 2:
        raise InvalidTimeFormat(f"Invalid start time: {value!r} (minutes must be two digits)")
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise InvalidTimeFormat(
        f"Invalid start time: {value!r} (expected HH:MM or h:MM AM/PM)"
    )


def parse_date(value: Union[str, date]) -> date:
    """Normalize a calendar date given as a ``date`` or ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidDateFormat(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_duration(value: Any) -> int:
    """Validate a duration in minutes and return it as an int.

    Accepts ints, integral floats and numeric strings. Raises
    InvalidDuration for anything else, including zero and negatives.
    """
    if isinstance(value, bool):
        raise InvalidDuration(f"Invalid duration: {value!r}")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidDuration(f"Invalid duration: {value!r}") from None
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidDuration(f"Duration must be whole minutes, got {value!r}")
        value = int(value)
    elif not isinstance(value, int):
        raise InvalidDuration(f"Invalid duration: {value!r}")

    if value <= 0:
        raise InvalidDuration(f"Duration must be positive, got {value}")
    return value


def hours_to_minutes(hours: Union[int, float, str]) -> int:
    """Convert a legacy duration expressed in hours into whole minutes."""
    if isinstance(hours, bool):
        raise InvalidDuration(f"Invalid duration in hours: {hours!r}")
    try:
        minutes = round(float(hours) * 60)
    except (TypeError, ValueError):
        raise InvalidDuration(f"Invalid duration in hours: {hours!r}") from None
    return parse_duration(minutes)


def ensure_same_day(start_time: time, duration_minutes: int) -> None:
    """Reject a window that would end after midnight of its own date.

    Snapshots are taken per date, so a window spilling into the next day
    could never be compared against that day's bookings. Ending exactly at
    midnight is allowed.
    """
    start = start_time.hour * 60 + start_time.minute
    if start + duration_minutes > MINUTES_PER_DAY:
        raise InvalidDuration(
            f"A booking starting at {start_time.strftime('%H:%M')} can last at most "
            f"{MINUTES_PER_DAY - start} minutes, got {duration_minutes}"
        )


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, start + duration) on a calendar date."""

    date: date
    start_time: time
    duration_minutes: int

    def __post_init__(self) -> None:
        if isinstance(self.duration_minutes, bool) or not isinstance(self.duration_minutes, int):
            raise InvalidDuration(f"Invalid duration: {self.duration_minutes!r}")
        if self.duration_minutes <= 0:
            raise InvalidDuration(f"Duration must be positive, got {self.duration_minutes}")
        ensure_same_day(self.start_time, self.duration_minutes)

    @classmethod
    def parse(
        cls,
        on_date: Union[str, date],
        start_time: Union[str, time],
        duration_minutes: Any,
    ) -> "TimeWindow":
        """Build a window from loosely typed input, validating every part."""
        return cls(
            date=parse_date(on_date),
            start_time=parse_start_time(start_time),
            duration_minutes=parse_duration(duration_minutes),
        )

    @property
    def start(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    @property
    def end_time(self) -> time:
        return self.end.time()

    def overlaps(self, other: "TimeWindow") -> bool:
        """Standard half-open overlap; touching endpoints do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        """Inclusive containment, used only for the advisory buffer."""
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class Booking:
    """An existing reservation as seen by the engine."""

    booking_id: str
    venue_id: str
    window: TimeWindow
    status: str
    venue_name: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityQuery:
    """A request to use ``venue_id`` during ``window``."""

    venue_id: str
    window: TimeWindow

    @property
    def date(self) -> date:
        return self.window.date


@dataclass(frozen=True)
class AvailabilityResult:
    """Decision plus the bookings that explain it."""

    available: bool
    reason: Optional[str] = None
    conflicting_pending_bookings: tuple[Booking, ...] = field(default_factory=tuple)
    nearby_bookings: tuple[Booking, ...] = field(default_factory=tuple)


def _status_of(booking: Booking) -> BookingStatus:
    try:
        return BookingStatus(booking.status)
    except ValueError:
        raise InconsistentBookingSet(
            f"Booking {booking.booking_id} has unknown status {booking.status!r}"
        ) from None


def _check_snapshot(query: AvailabilityQuery, bookings: Iterable[Booking]) -> None:
    for booking in bookings:
        if booking.venue_id != query.venue_id or booking.window.date != query.date:
            raise InconsistentBookingSet(
                f"Booking {booking.booking_id} is for venue {booking.venue_id!r} on "
                f"{booking.window.date.isoformat()}, expected {query.venue_id!r} on "
                f"{query.date.isoformat()}"
            )


def _is_nearby(
    requested: TimeWindow, booking: TimeWindow, buffer_start: datetime, buffer_end: datetime
) -> bool:
    return (
        buffer_start <= booking.start <= buffer_end
        or buffer_start <= booking.end <= buffer_end
        or booking.contains(requested.start)
        or booking.contains(requested.end)
    )


def check_availability(
    query: AvailabilityQuery,
    existing_bookings: Sequence[Booking],
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
) -> AvailabilityResult:
    """
    Decide whether ``query.window`` is free at ``query.venue_id``.

    ``existing_bookings`` must be the venue's bookings for the query date.
    Accepted overlaps block; pending overlaps are reported but never block;
    with no overlap at all, bookings within ``buffer_minutes`` of the window
    (inclusive on both ends) are reported as nearby.

    Raises:
        InconsistentBookingSet: If a booking has an unknown status or does
            not belong to the queried venue and date.
    """
    requested = query.window
    _check_snapshot(query, existing_bookings)

    accepted: list[Booking] = []
    pending: list[Booking] = []
    for booking in existing_bookings:
        status = _status_of(booking)
        if status == BookingStatus.ACCEPTED:
            accepted.append(booking)
        elif status == BookingStatus.PENDING:
            pending.append(booking)

    if any(requested.overlaps(b.window) for b in accepted):
        logger.info(
            "Venue %s blocked at %s on %s",
            query.venue_id, requested.start_time.strftime("%H:%M"), requested.date,
        )
        return AvailabilityResult(available=False, reason=BLOCKED_BY_ACCEPTED_BOOKING)

    contested = tuple(b for b in pending if requested.overlaps(b.window))
    if contested:
        logger.info(
            "Venue %s has %d pending request(s) overlapping %s on %s",
            query.venue_id, len(contested),
            requested.start_time.strftime("%H:%M"), requested.date,
        )
        return AvailabilityResult(available=True, conflicting_pending_bookings=contested)

    padding = timedelta(minutes=buffer_minutes)
    # the buffer may reach into the neighbouring days
    buffer_start, buffer_end = requested.start - padding, requested.end + padding
    nearby = tuple(
        b for b in existing_bookings
        if _status_of(b) != BookingStatus.REJECTED
        and _is_nearby(requested, b.window, buffer_start, buffer_end)
    )
    logger.info(
        "Venue %s available at %s on %s (%d nearby)",
        query.venue_id, requested.start_time.strftime("%H:%M"), requested.date, len(nearby),
    )
    return AvailabilityResult(available=True, nearby_bookings=nearby)
