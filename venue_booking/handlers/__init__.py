from venue_booking.handlers.admin_guard import AdminAuthorizationError, AdminGuard
from venue_booking.handlers.booking_handler import BookingRequestHandler
from venue_booking.handlers.responses import HandlerResponse
from venue_booking.handlers.venue_handler import VenueRequestHandler

__all__ = [
    "AdminGuard", "AdminAuthorizationError",
    "BookingRequestHandler", "VenueRequestHandler", "HandlerResponse",
]
