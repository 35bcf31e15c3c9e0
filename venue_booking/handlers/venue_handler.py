"""Venue registry endpoints. Mutations are admin-only."""

from typing import Any, Optional

from venue_booking.handlers.admin_guard import AdminGuard
from venue_booking.handlers.responses import HANDLED_ERRORS, HandlerResponse, error_response
from venue_booking.logging_context import get_request_logger, new_request_id
from venue_booking.schemas.venue_schema import VenueRequest
from venue_booking.tools import venue as venue_store

logger = get_request_logger(__name__)


class VenueRequestHandler:
    """Venue registry endpoints; reads are public, writes need an admin."""

    def __init__(self, admin_guard: Optional[AdminGuard] = None) -> None:
        self._guard = admin_guard or AdminGuard()

    async def create_venue(self, user_email: Optional[str], payload: dict[str, Any]) -> HandlerResponse:
        new_request_id()
        try:
            self._guard.require_admin(user_email)
            venue = venue_store.create_venue(VenueRequest.model_validate(payload))
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(201, venue.to_public())

    async def get_venue(self, venue_id: str) -> HandlerResponse:
        new_request_id()
        try:
            venue = venue_store.get_venue(venue_id)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, venue.to_public())

    async def list_venues(self) -> HandlerResponse:
        new_request_id()
        return HandlerResponse(200, [v.to_public() for v in venue_store.get_all_venues()])

    async def update_venue(
        self, user_email: Optional[str], venue_id: str, payload: dict[str, Any]
    ) -> HandlerResponse:
        new_request_id()
        try:
            self._guard.require_admin(user_email)
            venue = venue_store.update_venue(venue_id, VenueRequest.model_validate(payload))
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        return HandlerResponse(200, venue.to_public())

    async def delete_venue(self, user_email: Optional[str], venue_id: str) -> HandlerResponse:
        new_request_id()
        try:
            self._guard.require_admin(user_email)
            venue = venue_store.delete_venue(venue_id)
        except HANDLED_ERRORS as exc:
            return error_response(exc)
        logger.info("Venue %s removed", venue_id)
        return HandlerResponse(200, venue.to_public())
