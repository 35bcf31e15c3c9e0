"""
Booking status lifecycle.

A booking is created ``pending`` and is decided exactly once by an
administrator: ``pending -> accepted`` or ``pending -> rejected``. Decided
bookings are terminal; only their feedback field may change afterwards.

Usage:
    sm = BookingStatusMachine()
    sm.transition(BookingStatus.ACCEPTED)
    assert sm.is_terminal()
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from venue_booking.tools.availability import BookingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus


@dataclass
class StatusEntry:
    """Recorded history entry for a status change."""
    status: BookingStatus
    entered_at: datetime
    actor: Optional[str] = None


class InvalidTransitionError(Exception):
    """Raised when a status change is not valid from the current status."""


class BookingStatusMachine:
    """Enforces the one-shot admin decision on a booking."""

    TRANSITIONS: list[Transition] = [
        Transition(BookingStatus.PENDING, BookingStatus.ACCEPTED),
        Transition(BookingStatus.PENDING, BookingStatus.REJECTED),
    ]

    def __init__(self, status: BookingStatus = BookingStatus.PENDING) -> None:
        self._status = BookingStatus(status)
        self._history: list[StatusEntry] = [
            StatusEntry(status=self._status, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def status(self) -> BookingStatus:
        return self._status

    def can_transition(self, target: BookingStatus) -> bool:
        return any(
            t.from_status == self._status and t.to_status == target
            for t in self.TRANSITIONS
        )

    def transition(self, target: BookingStatus, actor: Optional[str] = None) -> BookingStatus:
        """
        Move to ``target``.

        Raises:
            InvalidTransitionError: If the booking was already decided or the
                target is not reachable from the current status.
        """
        target = BookingStatus(target)
        if not self.can_transition(target):
            valid = [s.value for s in self.get_valid_targets()]
            raise InvalidTransitionError(
                f"Cannot move booking from '{self._status.value}' to '{target.value}'. "
                f"Valid targets: {valid}"
            )

        old = self._status
        self._status = target
        self._history.append(
            StatusEntry(status=target, entered_at=datetime.now(timezone.utc), actor=actor)
        )
        logger.debug("Status transition: %s -> %s (by %s)", old.value, target.value, actor)
        return self._status

    def get_valid_targets(self) -> list[BookingStatus]:
        return [t.to_status for t in self.TRANSITIONS if t.from_status == self._status]

    def get_history(self) -> list[StatusEntry]:
        return list(self._history)

    def is_terminal(self) -> bool:
        return not self.get_valid_targets()
