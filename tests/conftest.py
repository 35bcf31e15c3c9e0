"""Shared test fixtures and helpers."""

from datetime import date
from typing import Any, Optional

import pytest
import pytest_asyncio

from venue_booking.handlers import AdminGuard, BookingRequestHandler, VenueRequestHandler
from venue_booking.mail import RecordingNotifier
from venue_booking.tools import booking as booking_store
from venue_booking.tools import venue as venue_store
from venue_booking.tools.availability import Booking, BookingStatus, TimeWindow

DAY = date(2025, 3, 18)
VENUE_ID = "VN-TEST01"
ADMIN = "registrar@iitbhu.ac.in"
ADMINS = ("doaa@iitbhu.ac.in", "dosa@iitbhu.ac.in", ADMIN)


@pytest.fixture(autouse=True)
def _clean_stores():
    booking_store.reset()
    venue_store.reset()
    yield
    booking_store.reset()
    venue_store.reset()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def admin_guard():
    return AdminGuard(ADMINS)


@pytest.fixture
def handler(notifier, admin_guard):
    return BookingRequestHandler(notifier, admin_guard=admin_guard, buffer_minutes=60)


@pytest.fixture
def venue_handler(admin_guard):
    return VenueRequestHandler(admin_guard=admin_guard)


@pytest_asyncio.fixture
async def venue_id(venue_handler):
    response = await venue_handler.create_venue(ADMIN, venue_payload())
    assert response.status_code == 201
    return response.body["venueId"]


def make_window(start: str, minutes: int, on: date = DAY) -> TimeWindow:
    return TimeWindow.parse(on, start, minutes)


_counter = {"n": 0}


def make_booking(
    start: str,
    minutes: int,
    status: str = BookingStatus.ACCEPTED,
    venue_id: str = VENUE_ID,
    on: date = DAY,
    booking_id: Optional[str] = None,
) -> Booking:
    """Helper to create an engine Booking with sensible defaults."""
    _counter["n"] += 1
    return Booking(
        booking_id=booking_id or f"BK-{_counter['n']:06d}",
        venue_id=venue_id,
        window=make_window(start, minutes, on),
        status=status,
    )


def venue_payload(name: str = "Main Auditorium") -> dict[str, Any]:
    return {
        "venueName": name,
        "venueLocation": "Central Block",
        "seatingCapacity": 400,
        "acAvailable": True,
        "projectorAvailable": False,
    }


def booking_payload(
    venue_id: str,
    start: str = "14:00",
    duration: Any = 60,
    on: str = "2025-03-18",
    **overrides: Any,
) -> dict[str, Any]:
    """Helper to build a valid camelCase booking request body."""
    payload: dict[str, Any] = {
        "venueId": venue_id,
        "date": on,
        "timings": {"startTime": start, "duration": duration},
        "reason": "Annual tech talk",
        "organisation": "Robotics Club",
        "poc": {"name": "Asha Verma", "phone": "9876543210", "email": "asha.verma@itbhu.ac.in"},
        "phoneNumber": "98765 43210",
        "email": "club.secretary@itbhu.ac.in",
    }
    payload.update(overrides)
    return payload
