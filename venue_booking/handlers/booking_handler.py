"""
Booking request handler.

Sits between the HTTP layer and the domain: validates request bodies with
the pydantic schemas, asks the availability engine for a decision over a
storage snapshot, persists through the booking store and sends notifications
through the injected ``Notifier``. Every method returns a ``HandlerResponse``;
nothing here writes to a transport directly.
"""

from typing import Any, Optional

from venue_booking.config import settings
from venue_booking.handlers.admin_guard import AdminGuard
from venue_booking.handlers.responses import HANDLED_ERRORS, HandlerResponse, error_response
from venue_booking.logging_context import get_request_logger, new_request_id
from venue_booking.mail.notifier import NotificationResult, Notifier
from venue_booking.mail.templates import (
    EmailMessage,
    build_accepted_email,
    build_admin_request_email,
    build_rejected_email,
)
from venue_booking.schemas.booking_schema import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingRecord,
    BookingRequest,
    FeedbackRequest,
)
from venue_booking.tools import booking as booking_store
from venue_booking.tools import venue as venue_store
from venue_booking.tools.availability import (
    AvailabilityQuery,
    AvailabilityResult,
    BookingStatus,
    TimeWindow,
    check_availability,
)

logger = get_request_logger(__name__)


class BookingRequestHandler:
    """Booking, availability and admin decision endpoints."""

    def __init__(
        self,
        notifier: Notifier,
        admin_guard: Optional[AdminGuard] = None,
        buffer_minutes: Optional[int] = None,
    ) -> None:
        self._notifier = notifier
        self._guard = admin_guard or AdminGuard()
        self._buffer_minutes = (
            settings.booking.buffer_minutes if buffer_minutes is None else buffer_minutes
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _evaluate(
        self, venue_id: str, window: TimeWindow, ignore_booking: Optional[str] = None
    ) -> AvailabilityResult:
        snapshot = [
            b for b in booking_store.find_bookings_for_venue(venue_id, window.date)
            if b.booking_id != ignore_booking
        ]
        return check_availability(
            AvailabilityQuery(venue_id=venue_id, window=window),
            snapshot,
            buffer_minutes=self._buffer_minutes,
        )

    def _with_venue_details(self, request: BookingRequest) -> BookingRequest:
        venue = venue_store.get_venue(request.venue_id)
        return request.model_copy(update={
            "venue_name": request.venue_name or venue.venue_name,
            "venue_location": request.venue_location or venue.venue_location,
        })

    async def _notify(self, messages: list[EmailMessage]) -> list[NotificationResult]:
        results = []
        for message in messages:
            results.append(await self._notifier.send(message))
        return results

    @staticmethod
    def _notification_body(result: NotificationResult) -> dict[str, Any]:
        body: dict[str, Any] = {"sent": result.success, "recipient": result.recipient}
        if result.error:
            body["error"] = result.error
        return body

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    async def check_venue_availability(
        self, venue_id: str, params: dict[str, Any]
    ) -> HandlerResponse:
        """Classify a requested window at a venue without booking it."""
        new_request_id()
        try:
            query = AvailabilityRequest.model_validate(params)
            venue_store.get_venue(venue_id)
            result = self._evaluate(venue_id, query.to_window())
        except HANDLED_ERRORS as exc:
            logger.warning("Availability check rejected for venue %s: %s", venue_id, exc)
            return error_response(exc)
        return HandlerResponse(200, AvailabilityResponse.from_result(result).to_body())

    # ------------------------------------------------------------------ #
    # Booking CRUD
    # ------------------------------------------------------------------ #

    async def create_booking_request(self, payload: dict[str, Any]) -> HandlerResponse:
        """Validate, check availability, store as pending and ask admins to decide."""
        new_request_id()
        try:
            request = self._with_venue_details(BookingRequest.model_validate(payload))
            result = self._evaluate(request.venue_id, request.to_window())
        except HANDLED_ERRORS as exc:
            logger.warning("Booking request rejected: %s", exc)
            return error_response(exc)

        availability = AvailabilityResponse.from_result(result).to_body()
        if not result.available:
            logger.info("Booking request for %s blocked by an accepted booking", request.venue_id)
            return HandlerResponse(409, {
                "error": "BookingConflict",
                "message": "Place already booked",
                "availability": availability,
            })

        record = booking_store.create_booking(request)
        contested = len(result.conflicting_pending_bookings)
        results = await self._notify([
            build_admin_request_email(record, admin, contested=contested)
            for admin in sorted(self._guard.admin_emails)
        ])
        body = {
            "booking": record.to_public(),
            "availability": availability,
            "notifications": [self._notification_body(r) for r in results],
        }
        if results and not any(r.success for r in results):
            logger.error("No administrator could be notified about booking %s", record.booking_id)
            body["error"] = "NotificationFailed"
            return HandlerResponse(502, body)
        return HandlerResponse(201, body)

    async def get_booking(self, booking_id: str) -> HandlerResponse:
        new_request_id()
        try:
            record = booking_store.get_booking(booking_id)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, record.to_public())

    async def list_bookings(self) -> HandlerResponse:
        new_request_id()
        return HandlerResponse(200, [b.to_public() for b in booking_store.get_all_bookings()])

    async def get_booking_status(self, booking_id: str) -> HandlerResponse:
        new_request_id()
        try:
            record = booking_store.get_booking(booking_id)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, {"status": record.status.value})

    async def update_booking(self, booking_id: str, payload: dict[str, Any]) -> HandlerResponse:
        """Reschedule or edit an undecided booking; the new window is re-checked."""
        new_request_id()
        try:
            booking_store.get_booking(booking_id)
            request = self._with_venue_details(BookingRequest.model_validate(payload))
            result = self._evaluate(
                request.venue_id, request.to_window(), ignore_booking=booking_id
            )
            if not result.available:
                return HandlerResponse(409, {
                    "error": "BookingConflict",
                    "message": "Place already booked",
                    "availability": AvailabilityResponse.from_result(result).to_body(),
                })
            record = booking_store.update_booking(booking_id, request)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, record.to_public())

    async def delete_booking(self, booking_id: str) -> HandlerResponse:
        new_request_id()
        try:
            record = booking_store.delete_booking(booking_id)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, record.to_public())

    async def submit_feedback(self, booking_id: str, payload: dict[str, Any]) -> HandlerResponse:
        new_request_id()
        try:
            feedback = FeedbackRequest.model_validate(payload)
            booking_store.submit_feedback(booking_id, feedback.feedback)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, {"message": "Feedback submitted successfully"})

    # ------------------------------------------------------------------ #
    # Admin actions
    # ------------------------------------------------------------------ #

    async def list_pending_bookings(self, user_email: Optional[str]) -> HandlerResponse:
        new_request_id()
        try:
            self._guard.require_admin(user_email)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(
            200, [b.to_public() for b in booking_store.get_pending_bookings()]
        )

    async def accept_booking(self, user_email: Optional[str], booking_id: str) -> HandlerResponse:
        """Accept a pending booking unless another accepted booking now holds the slot."""
        new_request_id()
        try:
            admin = self._guard.require_admin(user_email)
            record = booking_store.get_booking(booking_id)
            if record.status == BookingStatus.PENDING:
                result = self._evaluate(record.venue_id, record.window, ignore_booking=booking_id)
                if not result.available:
                    logger.info("Cannot accept %s: slot already taken", booking_id)
                    return HandlerResponse(409, {
                        "error": "BookingConflict",
                        "message": "Place already booked",
                    })
            record = booking_store.update_booking_status(
                booking_id, BookingStatus.ACCEPTED, actor=admin
            )
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return await self._decided(record, build_accepted_email(record))

    async def reject_booking(self, user_email: Optional[str], booking_id: str) -> HandlerResponse:
        new_request_id()
        try:
            admin = self._guard.require_admin(user_email)
            record = booking_store.update_booking_status(
                booking_id, BookingStatus.REJECTED, actor=admin
            )
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return await self._decided(record, build_rejected_email(record))

    async def _decided(self, record: BookingRecord, message: EmailMessage) -> HandlerResponse:
        logger.info("Booking %s for ID: %s", record.status.value, record.booking_id)
        [result] = await self._notify([message])
        return HandlerResponse(200, {
            "booking": record.to_public(),
            "notification": self._notification_body(result),
        })
