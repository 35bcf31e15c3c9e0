"""Tests for BookingRequestHandler with an in-memory notifier."""

import pytest

from tests.conftest import ADMIN, ADMINS, booking_payload
from venue_booking.handlers import AdminGuard, BookingRequestHandler
from venue_booking.mail import RecordingNotifier
from venue_booking.tools import booking as booking_store


async def _create(handler, venue_id, **kwargs):
    response = await handler.create_booking_request(booking_payload(venue_id, **kwargs))
    return response


async def _create_accepted(handler, venue_id, **kwargs) -> str:
    created = await _create(handler, venue_id, **kwargs)
    booking_id = created.body["booking"]["bookingId"]
    accepted = await handler.accept_booking(ADMIN, booking_id)
    assert accepted.status_code == 200
    return booking_id


class TestCheckVenueAvailability:
    @pytest.mark.asyncio
    async def test_free_venue(self, handler, venue_id):
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "10:00", "duration": 60}
        )
        assert response.status_code == 200
        assert response.body == {
            "available": True,
            "conflictingPendingBookings": [],
            "nearbyBookings": [],
        }

    @pytest.mark.asyncio
    async def test_blocked_by_accepted(self, handler, venue_id):
        await _create_accepted(handler, venue_id, start="14:00", duration=60)
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "14:30", "duration": 30}
        )
        assert response.body["available"] is False
        assert response.body["reason"] == "blocked-by-accepted-booking"

    @pytest.mark.asyncio
    async def test_pending_contention_listed(self, handler, venue_id):
        created = await _create(handler, venue_id, start="09:00", duration=60)
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "9:30 AM", "duration": 45}
        )
        assert response.body["available"] is True
        [pending] = response.body["conflictingPendingBookings"]
        assert pending["bookingId"] == created.body["booking"]["bookingId"]

    @pytest.mark.asyncio
    async def test_adjacent_booking_is_nearby(self, handler, venue_id):
        await _create_accepted(handler, venue_id, start="10:00", duration=60)
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "11:00", "duration": 30}
        )
        assert response.body["available"] is True
        assert len(response.body["nearbyBookings"]) == 1

    @pytest.mark.asyncio
    async def test_rejected_booking_frees_slot(self, handler, venue_id):
        created = await _create(handler, venue_id, start="14:00")
        await handler.reject_booking(ADMIN, created.body["booking"]["bookingId"])
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "14:00", "duration": 60}
        )
        assert response.body["available"] is True
        assert response.body["conflictingPendingBookings"] == []
        assert response.body["nearbyBookings"] == []

    @pytest.mark.asyncio
    async def test_malformed_time(self, handler, venue_id):
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "2pm-ish", "duration": 30}
        )
        assert response.status_code == 400
        assert response.body["error"] == "InvalidTimeFormat"

    @pytest.mark.asyncio
    async def test_non_positive_duration(self, handler, venue_id):
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "14:00", "duration": -30}
        )
        assert response.status_code == 400
        assert response.body["error"] == "InvalidDuration"

    @pytest.mark.asyncio
    async def test_window_past_midnight_is_rejected(self, handler, venue_id):
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "23:30", "duration": 60}
        )
        assert response.status_code == 400
        assert response.body["error"] == "InvalidDuration"

    @pytest.mark.asyncio
    async def test_unknown_venue(self, handler):
        response = await handler.check_venue_availability(
            "VN-MISSING", {"date": "2025-03-18", "startTime": "14:00", "duration": 30}
        )
        assert response.status_code == 404


class TestCreateBookingRequest:
    @pytest.mark.asyncio
    async def test_creates_pending_booking_and_notifies_admins(self, handler, notifier, venue_id):
        response = await _create(handler, venue_id)
        assert response.status_code == 201
        booking = response.body["booking"]
        assert booking["status"] == "pending"
        assert booking["venueName"] == "Main Auditorium"
        assert sorted(m.to for m in notifier.outbox) == sorted(ADMINS)
        assert all("Main Auditorium" in m.subject for m in notifier.outbox)
        assert all(n["sent"] for n in response.body["notifications"])

    @pytest.mark.asyncio
    async def test_blocked_request_is_not_stored(self, handler, notifier, venue_id):
        await _create_accepted(handler, venue_id, start="14:00")
        sent_before = len(notifier.outbox)
        response = await _create(handler, venue_id, start="14:30", duration=30)
        assert response.status_code == 409
        assert response.body["availability"]["reason"] == "blocked-by-accepted-booking"
        assert len(booking_store.get_all_bookings()) == 1
        assert len(notifier.outbox) == sent_before

    @pytest.mark.asyncio
    async def test_competing_pending_request_is_allowed(self, handler, notifier, venue_id):
        await _create(handler, venue_id, start="09:00")
        response = await _create(handler, venue_id, start="09:30", duration=45)
        assert response.status_code == 201
        assert len(response.body["availability"]["conflictingPendingBookings"]) == 1
        assert "overlap this time slot" in notifier.outbox[-1].html

    @pytest.mark.asyncio
    async def test_invalid_email(self, handler, venue_id):
        response = await _create(handler, venue_id, email="someone@example.com")
        assert response.status_code == 400
        assert response.body["error"] == "ValidationError"
        assert any(d["field"] == "email" for d in response.body["details"])

    @pytest.mark.asyncio
    async def test_invalid_time_never_reaches_store(self, handler, venue_id):
        response = await _create(handler, venue_id, start="25:99")
        assert response.status_code == 400
        assert response.body["error"] == "InvalidTimeFormat"
        assert booking_store.get_all_bookings() == []

    @pytest.mark.asyncio
    async def test_booking_past_midnight_never_reaches_store(self, handler, notifier, venue_id):
        response = await _create(handler, venue_id, start="23:00", duration=180)
        assert response.status_code == 400
        assert response.body["error"] == "InvalidDuration"
        assert booking_store.get_all_bookings() == []
        assert notifier.outbox == []

    @pytest.mark.asyncio
    async def test_late_booking_blocks_next_request_on_same_day(self, handler, venue_id):
        await _create_accepted(handler, venue_id, start="23:00", duration=60)
        response = await _create(handler, venue_id, start="23:30", duration=30)
        assert response.status_code == 409
        next_day = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-19", "startTime": "00:00", "duration": 30}
        )
        assert next_day.body["available"] is True

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_booking_pending(self, admin_guard, venue_id):
        notifier = RecordingNotifier(fail_for=set(ADMINS))
        handler = BookingRequestHandler(notifier, admin_guard=admin_guard)
        response = await _create(handler, venue_id)
        assert response.status_code == 502
        assert response.body["error"] == "NotificationFailed"
        booking_id = response.body["booking"]["bookingId"]
        assert booking_store.get_booking(booking_id).status == "pending"

    @pytest.mark.asyncio
    async def test_partial_notification_failure_still_created(self, admin_guard, venue_id):
        notifier = RecordingNotifier(fail_for={ADMIN})
        handler = BookingRequestHandler(notifier, admin_guard=admin_guard)
        response = await _create(handler, venue_id)
        assert response.status_code == 201
        failed = [n for n in response.body["notifications"] if not n["sent"]]
        assert [n["recipient"] for n in failed] == [ADMIN]


class TestAdminDecisions:
    @pytest.mark.asyncio
    async def test_accept_notifies_point_of_contact(self, handler, notifier, venue_id):
        created = await _create(handler, venue_id)
        booking_id = created.body["booking"]["bookingId"]
        response = await handler.accept_booking(ADMIN, booking_id)
        assert response.status_code == 200
        assert response.body["booking"]["status"] == "accepted"
        [mail] = notifier.sent_to("asha.verma@itbhu.ac.in")
        assert "has been accepted" in mail.subject

    @pytest.mark.asyncio
    async def test_reject_notifies_point_of_contact(self, handler, notifier, venue_id):
        created = await _create(handler, venue_id)
        booking_id = created.body["booking"]["bookingId"]
        response = await handler.reject_booking(ADMIN, booking_id)
        assert response.body["booking"]["status"] == "rejected"
        [mail] = notifier.sent_to("asha.verma@itbhu.ac.in")
        assert "has been rejected" in mail.subject

    @pytest.mark.asyncio
    async def test_second_decision_conflicts(self, handler, venue_id):
        booking_id = await _create_accepted(handler, venue_id)
        response = await handler.reject_booking(ADMIN, booking_id)
        assert response.status_code == 409
        assert response.body["error"] == "InvalidTransitionError"

    @pytest.mark.asyncio
    async def test_cannot_accept_into_taken_slot(self, handler, venue_id):
        first = await _create(handler, venue_id, start="10:00")
        second = await _create(handler, venue_id, start="10:30")
        await handler.accept_booking(ADMIN, first.body["booking"]["bookingId"])
        response = await handler.accept_booking(ADMIN, second.body["booking"]["bookingId"])
        assert response.status_code == 409
        status = await handler.get_booking_status(second.body["booking"]["bookingId"])
        assert status.body == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_unauthenticated_is_401(self, handler, venue_id):
        created = await _create(handler, venue_id)
        response = await handler.accept_booking(None, created.body["booking"]["bookingId"])
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_is_403(self, handler, venue_id):
        created = await _create(handler, venue_id)
        response = await handler.reject_booking(
            "student@itbhu.ac.in", created.body["booking"]["bookingId"]
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_pending_list_is_admin_only(self, handler, venue_id):
        await _create(handler, venue_id)
        assert (await handler.list_pending_bookings("student@itbhu.ac.in")).status_code == 403
        response = await handler.list_pending_bookings(ADMIN.upper())
        assert response.status_code == 200
        assert len(response.body) == 1

    @pytest.mark.asyncio
    async def test_unknown_booking_is_404(self, handler):
        response = await handler.accept_booking(ADMIN, "BK-000000")
        assert response.status_code == 404


class TestBookingMaintenance:
    @pytest.mark.asyncio
    async def test_get_and_list(self, handler, venue_id):
        created = await _create(handler, venue_id)
        booking_id = created.body["booking"]["bookingId"]
        assert (await handler.get_booking(booking_id)).body["bookingId"] == booking_id
        assert len((await handler.list_bookings()).body) == 1

    @pytest.mark.asyncio
    async def test_update_reschedules_pending_booking(self, handler, venue_id):
        created = await _create(handler, venue_id, start="09:00")
        booking_id = created.body["booking"]["bookingId"]
        response = await handler.update_booking(
            booking_id, booking_payload(venue_id, start="09:30", duration=90)
        )
        assert response.status_code == 200
        assert response.body["timings"]["durationMinutes"] == 90

    @pytest.mark.asyncio
    async def test_update_into_accepted_slot_conflicts(self, handler, venue_id):
        await _create_accepted(handler, venue_id, start="14:00")
        created = await _create(handler, venue_id, start="09:00")
        response = await handler.update_booking(
            created.body["booking"]["bookingId"], booking_payload(venue_id, start="14:15")
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_update_after_decision_conflicts(self, handler, venue_id):
        booking_id = await _create_accepted(handler, venue_id, start="09:00")
        response = await handler.update_booking(booking_id, booking_payload(venue_id, start="11:00"))
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_frees_the_slot(self, handler, venue_id):
        booking_id = await _create_accepted(handler, venue_id, start="14:00")
        assert (await handler.delete_booking(booking_id)).status_code == 200
        assert (await handler.get_booking(booking_id)).status_code == 404
        response = await handler.check_venue_availability(
            venue_id, {"date": "2025-03-18", "startTime": "14:00", "duration": 60}
        )
        assert response.body["available"] is True

    @pytest.mark.asyncio
    async def test_feedback(self, handler, venue_id):
        booking_id = await _create_accepted(handler, venue_id)
        response = await handler.submit_feedback(booking_id, {"feedback": "Projector was great"})
        assert response.body == {"message": "Feedback submitted successfully"}
        assert booking_store.get_booking(booking_id).feedback == "Projector was great"

    @pytest.mark.asyncio
    async def test_feedback_required(self, handler, venue_id):
        booking_id = await _create_accepted(handler, venue_id)
        response = await handler.submit_feedback(booking_id, {})
        assert response.status_code == 400


class TestHandlerDefaults:
    def test_default_guard_uses_configured_admins(self):
        handler = BookingRequestHandler(RecordingNotifier())
        assert isinstance(handler._guard, AdminGuard)
        assert ADMIN in handler._guard.admin_emails
