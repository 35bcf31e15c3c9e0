"""Venue data models."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VenueRequest(BaseModel):
    """Validated venue create/update body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    venue_name: str = Field(min_length=1)
    venue_location: str = Field(min_length=1)
    seating_capacity: int = Field(ge=1)
    ac_available: bool = False
    projector_available: bool = False


class Venue(VenueRequest):
    """A bookable physical space."""

    venue_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
