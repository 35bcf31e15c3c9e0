"""
Console demo for the venue availability engine.

Seeds one venue with an accepted and a pending booking, then checks the
requested window against them and prints the JSON response.

Usage:
    python main.py --date 2025-03-18 --start 14:30 --duration 30
    python main.py --date 2025-03-18 --start "9:30 AM" --duration 45
"""

import argparse
import asyncio
import json
import logging
import sys

from venue_booking.handlers import BookingRequestHandler, VenueRequestHandler
from venue_booking.mail import RecordingNotifier

logger = logging.getLogger(__name__)

DEMO_ADMIN = "registrar@iitbhu.ac.in"


def _booking_payload(venue_id: str, date: str, start: str, minutes: int, org: str) -> dict:
    return {
        "venueId": venue_id,
        "date": date,
        "timings": {"startTime": start, "duration": minutes},
        "reason": "Demo event",
        "organisation": org,
        "poc": {"name": "Demo Contact", "phone": "9876543210", "email": "poc@itbhu.ac.in"},
        "phoneNumber": "9876543210",
        "email": "student@itbhu.ac.in",
    }


async def _run(date: str, start: str, duration: int) -> int:
    notifier = RecordingNotifier()
    venues = VenueRequestHandler()
    bookings = BookingRequestHandler(notifier)

    created = await venues.create_venue(DEMO_ADMIN, {
        "venueName": "Main Auditorium",
        "venueLocation": "Central Block",
        "seatingCapacity": 400,
        "acAvailable": True,
        "projectorAvailable": True,
    })
    venue_id = created.body["venueId"]

    accepted = await bookings.create_booking_request(
        _booking_payload(venue_id, date, "14:00", 60, "Robotics Club")
    )
    await bookings.accept_booking(DEMO_ADMIN, accepted.body["booking"]["bookingId"])
    await bookings.create_booking_request(
        _booking_payload(venue_id, date, "09:00", 60, "Music Society")
    )

    response = await bookings.check_venue_availability(
        venue_id, {"date": date, "startTime": start, "duration": duration}
    )
    sys.stdout.write(json.dumps(response.body, indent=2) + "\n")
    logger.info("Demo sent %d notification(s)", len(notifier.outbox))
    return 0 if response.ok else 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check a requested window against a seeded demo venue."
    )
    parser.add_argument("--date", type=str, required=True, help="Date as YYYY-MM-DD.")
    parser.add_argument("--start", type=str, required=True, help="Start time, 24h or 12h.")
    parser.add_argument("--duration", type=int, default=60, help="Duration in minutes.")
    args = parser.parse_args()

    sys.exit(asyncio.run(_run(args.date, args.start, args.duration)))


if __name__ == "__main__":
    main()
