"""
In-memory venue registry.

In production this would be the venues collection of the booking database.
Venue names are unique.
"""

import logging
import uuid

from venue_booking.schemas.venue_schema import Venue, VenueRequest

logger = logging.getLogger(__name__)


class VenueNotFoundError(LookupError):
    """Raised when no venue has the given ID."""


class DuplicateVenueError(ValueError):
    """Raised when a venue with the same name already exists."""


_venues: dict[str, Venue] = {}


def _name_taken(name: str, exclude_id: str = "") -> bool:
    key = name.strip().lower()
    return any(
        v.venue_name.lower() == key and v.venue_id != exclude_id for v in _venues.values()
    )


def create_venue(request: VenueRequest) -> Venue:
    """Register a new venue."""
    if _name_taken(request.venue_name):
        logger.warning("Venue creation failed. Venue already exists: %s", request.venue_name)
        raise DuplicateVenueError(f"Venue already exists: {request.venue_name}")
    venue = Venue(venue_id=f"VN-{uuid.uuid4().hex[:6].upper()}", **dict(request))
    _venues[venue.venue_id] = venue
    logger.info("New venue created successfully: %s", venue.venue_name)
    return venue


def get_venue(venue_id: str) -> Venue:
    venue = _venues.get(venue_id)
    if venue is None:
        logger.warning("Venue not found with ID: %s", venue_id)
        raise VenueNotFoundError(f"Venue {venue_id} not found")
    return venue


def get_all_venues() -> list[Venue]:
    venues = list(_venues.values())
    logger.info("Retrieved all venues - count: %d", len(venues))
    return venues


def update_venue(venue_id: str, request: VenueRequest) -> Venue:
    venue = get_venue(venue_id)
    if _name_taken(request.venue_name, exclude_id=venue_id):
        raise DuplicateVenueError(f"Venue already exists: {request.venue_name}")
    updated = venue.model_copy(update=dict(request))
    _venues[venue_id] = updated
    logger.info("Venue updated successfully: %s", venue_id)
    return updated


def delete_venue(venue_id: str) -> Venue:
    venue = get_venue(venue_id)
    del _venues[venue_id]
    logger.info("Venue deleted successfully: %s", venue_id)
    return venue


def reset() -> None:
    """Clear all venues. Used by test fixtures for isolation."""
    _venues.clear()
