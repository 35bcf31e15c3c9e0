"""Booking request, storage and availability response models."""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from venue_booking.config import settings
from venue_booking.tools.availability import (
    AvailabilityResult,
    Booking,
    BookingStatus,
    TimeWindow,
    ensure_same_day,
    hours_to_minutes,
    parse_date,
    parse_duration,
    parse_start_time,
)
from venue_booking.utils import normalize_email, normalize_phone

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


def _validate_institute_email(value: str) -> str:
    email = normalize_email(value)
    if "@" not in email or not email.endswith(settings.booking.institute_email_domain):
        raise ValueError("Please use your institute email ID")
    return email


def _validate_phone(value: str) -> str:
    digits = normalize_phone(value)
    if not digits.isdigit() or len(digits) != settings.booking.phone_digits:
        raise ValueError(
            f"Please provide a valid {settings.booking.phone_digits}-digit phone number"
        )
    return digits


class _DurationInput(BaseModel):
    """Shared start time / duration handling.

    Duration is minutes. A legacy ``durationHours`` value is accepted and
    converted at this boundary so nothing downstream ever sees hours.
    """

    model_config = _CAMEL

    start_time: time
    duration_minutes: int

    @model_validator(mode="before")
    @classmethod
    def _convert_hours(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        hours = data.pop("durationHours", data.pop("duration_hours", None))
        minutes = data.pop("duration", None)
        if minutes is not None:
            if "durationMinutes" in data or "duration_minutes" in data:
                raise ValueError("Give either duration or durationMinutes, not both")
            data["durationMinutes"] = minutes
        if hours is not None:
            if "durationMinutes" in data or "duration_minutes" in data:
                raise ValueError("Give the duration in minutes or in hours, not both")
            data["durationMinutes"] = hours_to_minutes(hours)
        return data

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start(cls, value: Any) -> time:
        return parse_start_time(value)

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> int:
        duration = parse_duration(value)
        if duration > settings.booking.max_duration_minutes:
            raise ValueError(
                f"Duration must be at most {settings.booking.max_duration_minutes} minutes"
            )
        return duration

    @model_validator(mode="after")
    def _same_day(self) -> "_DurationInput":
        ensure_same_day(self.start_time, self.duration_minutes)
        return self


class Timings(_DurationInput):
    """When a booking starts and how long it runs."""


class PointOfContact(BaseModel):
    """Person responsible for the event."""

    model_config = _CAMEL

    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str = Field(min_length=3)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Point of contact email is not valid")
        return normalize_email(value)


class BookingRequest(BaseModel):
    """Validated booking request body.

    ``venueName`` and ``venueLocation`` may be omitted; the handler fills
    them from the registered venue.
    """

    model_config = _CAMEL

    venue_id: str = Field(min_length=1)
    venue_name: Optional[str] = None
    venue_location: Optional[str] = None
    timings: Timings
    booking_date: date = Field(alias="date")
    reason: str = Field(min_length=1)
    organisation: str = Field(min_length=1)
    poc: PointOfContact
    phone_number: str
    email: str

    @field_validator("booking_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date:
        return parse_date(value)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _validate_institute_email(value)

    @field_validator("phone_number")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        return _validate_phone(value)

    def to_window(self) -> TimeWindow:
        return TimeWindow(
            date=self.booking_date,
            start_time=self.timings.start_time,
            duration_minutes=self.timings.duration_minutes,
        )


class AvailabilityRequest(_DurationInput):
    """Query parameters for a venue availability check."""

    check_date: date = Field(alias="date")

    @field_validator("check_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date:
        return parse_date(value)

    def to_window(self) -> TimeWindow:
        return TimeWindow(
            date=self.check_date,
            start_time=self.start_time,
            duration_minutes=self.duration_minutes,
        )


class FeedbackRequest(BaseModel):
    """Post-event feedback from the point of contact."""

    model_config = _CAMEL

    feedback: str = Field(min_length=1, max_length=2000)


class BookingRecord(BaseModel):
    """A stored booking."""

    model_config = _CAMEL

    booking_id: str
    venue_id: str
    venue_name: str
    venue_location: str
    timings: Timings
    booking_date: date = Field(alias="date")
    reason: str
    organisation: str
    poc: PointOfContact
    phone_number: str
    email: str
    status: BookingStatus = BookingStatus.PENDING
    feedback: Optional[str] = None
    deleted: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(
            date=self.booking_date,
            start_time=self.timings.start_time,
            duration_minutes=self.timings.duration_minutes,
        )

    def to_engine_booking(self) -> Booking:
        """Read-only view consumed by the availability engine."""
        return Booking(
            booking_id=self.booking_id,
            venue_id=self.venue_id,
            window=self.window,
            status=self.status,
            venue_name=self.venue_name,
        )

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"deleted"})


class BookingSummary(BaseModel):
    """Compact booking view listed in availability responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    booking_id: str
    venue_id: str
    venue_name: Optional[str] = None
    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    status: str

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingSummary":
        status = booking.status
        return cls(
            booking_id=booking.booking_id,
            venue_id=booking.venue_id,
            venue_name=booking.venue_name,
            date=booking.window.date.isoformat(),
            start_time=booking.window.start_time.strftime("%H:%M"),
            end_time=booking.window.end_time.strftime("%H:%M"),
            duration_minutes=booking.window.duration_minutes,
            status=status.value if isinstance(status, Enum) else str(status),
        )


class AvailabilityResponse(BaseModel):
    """Availability check result as returned to API clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    available: bool
    reason: Optional[str] = None
    conflicting_pending_bookings: list[BookingSummary] = Field(default_factory=list)
    nearby_bookings: list[BookingSummary] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: AvailabilityResult) -> "AvailabilityResponse":
        return cls(
            available=result.available,
            reason=result.reason,
            conflicting_pending_bookings=[
                BookingSummary.from_booking(b) for b in result.conflicting_pending_bookings
            ],
            nearby_bookings=[BookingSummary.from_booking(b) for b in result.nearby_bookings],
        )

    def to_body(self) -> dict[str, Any]:
        """JSON body; ``reason`` is omitted unless the window is blocked."""
        body = self.model_dump(mode="json", by_alias=True)
        if body["reason"] is None:
            del body["reason"]
        return body
