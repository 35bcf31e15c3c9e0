"""HTML notification emails rendered with Jinja2."""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

from jinja2 import DictLoader, Environment

from venue_booking.config import settings
from venue_booking.schemas.booking_schema import BookingRecord
from venue_booking.utils import format_window

_BASE = """\
<div style="font-family: Arial, sans-serif; color: #333;">
  <h2>{{ heading }}</h2>
  <p>Hello,</p>
  {% block body %}{% endblock %}
</div>
"""

_ADMIN_REQUEST = """\
{% extends "base.html" %}
{% block body %}
<p>This is to confirm that <strong>{{ organisation }}</strong> has requested to book
<strong>{{ venue_name }}</strong> located at <strong>{{ venue_location }}</strong>
on <strong>{{ date }}</strong> from <strong>{{ timings }}</strong> for the following reason:</p>
<p><em>{{ reason }}</em></p>
<h4>Point of Contact</h4>
<p>Name: <strong>{{ poc.name }}</strong></p>
<p>Email: <strong>{{ poc.email }}</strong></p>
<p>Phone: <strong>{{ poc.phone }}</strong></p>
{% if contested %}
<p>Note: {{ contested }} other pending request(s) overlap this time slot.</p>
{% endif %}
<div style="margin-top: 20px;">
  <p>Please confirm the booking by clicking one of the options below:</p>
  <a href="{{ accept_url }}" style="display: inline-block; padding: 10px 15px; background-color: #28a745; color: white; text-decoration: none; border-radius: 5px; margin-right: 10px;">Yes</a>
  <a href="{{ reject_url }}" style="display: inline-block; padding: 10px 15px; background-color: #dc3545; color: white; text-decoration: none; border-radius: 5px;">No</a>
</div>
{% endblock %}
"""

_ACCEPTED = """\
{% extends "base.html" %}
{% block body %}
<p>We are pleased to inform you that your booking for <strong>{{ venue_name }}</strong>
at <strong>{{ venue_location }}</strong> on <strong>{{ date }}</strong>
from <strong>{{ timings }}</strong> has been <strong>accepted</strong>.</p>
<p>You can now proceed with the necessary arrangements for the event.</p>
<p>If you have any questions, feel free to contact us.</p>
{% endblock %}
"""

_REJECTED = """\
{% extends "base.html" %}
{% block body %}
<p>We regret to inform you that your booking for <strong>{{ venue_name }}</strong>
at <strong>{{ venue_location }}</strong> on <strong>{{ date }}</strong>
from <strong>{{ timings }}</strong> has been <strong>rejected</strong>.</p>
<p>If you have any questions or would like to inquire further, feel free to contact us.</p>
<p>We apologize for any inconvenience caused.</p>
<p>Best regards,</p>
<p>The Venue Management Team</p>
{% endblock %}
"""

_env = Environment(
    loader=DictLoader({
        "base.html": _BASE,
        "admin_request.html": _ADMIN_REQUEST,
        "accepted.html": _ACCEPTED,
        "rejected.html": _REJECTED,
    }),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class EmailMessage:
    """A rendered notification ready for delivery."""

    to: str
    subject: str
    html: str
    from_email: str = settings.mail.from_email
    cc: Optional[str] = None


def _booking_context(booking: BookingRecord) -> dict[str, Any]:
    return {
        "venue_name": booking.venue_name,
        "venue_location": booking.venue_location,
        "date": booking.booking_date.isoformat(),
        "timings": format_window(
            booking.timings.start_time.strftime("%H:%M"), booking.timings.duration_minutes
        ),
        "reason": booking.reason,
        "organisation": booking.organisation,
        "poc": booking.poc,
    }


def build_action_url(action: str, booking: BookingRecord) -> str:
    """Admin accept/reject link embedded in the approval request email."""
    query = urlencode({
        "bookingId": booking.booking_id,
        "venueName": booking.venue_name,
        "venueLocation": booking.venue_location,
        "date": booking.booking_date.isoformat(),
        "timing": booking.timings.start_time.strftime("%H:%M"),
        "recipientEmail": booking.poc.email,
    })
    base = settings.mail.public_base_url.rstrip("/")
    return f"{base}/api/bookings/admin/{action}?{query}"


def build_admin_request_email(
    booking: BookingRecord, recipient: str, contested: int = 0
) -> EmailMessage:
    """Approval request sent to an administrator."""
    html = _env.get_template("admin_request.html").render(
        heading="Booking Confirmation",
        accept_url=build_action_url("accept", booking),
        reject_url=build_action_url("reject", booking),
        contested=contested,
        **_booking_context(booking),
    )
    return EmailMessage(
        to=recipient, subject=f"Request for booking at {booking.venue_name}", html=html
    )


def build_accepted_email(booking: BookingRecord) -> EmailMessage:
    html = _env.get_template("accepted.html").render(
        heading="Booking Accepted", **_booking_context(booking)
    )
    return EmailMessage(
        to=booking.poc.email,
        subject=(
            f"Your Booking at {booking.venue_name} on "
            f"{booking.booking_date.isoformat()} has been accepted"
        ),
        html=html,
    )


def build_rejected_email(booking: BookingRecord) -> EmailMessage:
    html = _env.get_template("rejected.html").render(
        heading="Booking Rejected", **_booking_context(booking)
    )
    return EmailMessage(
        to=booking.poc.email,
        subject=(
            f"Your Booking at {booking.venue_name} on "
            f"{booking.booking_date.isoformat()} has been rejected"
        ),
        html=html,
    )
