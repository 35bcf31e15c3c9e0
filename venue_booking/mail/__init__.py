from venue_booking.mail.notifier import (
    NotificationError,
    NotificationResult,
    Notifier,
    RecordingNotifier,
    ResendNotifier,
)
from venue_booking.mail.templates import (
    EmailMessage,
    build_accepted_email,
    build_admin_request_email,
    build_rejected_email,
)

__all__ = [
    "EmailMessage", "Notifier", "NotificationResult", "NotificationError",
    "RecordingNotifier", "ResendNotifier",
    "build_admin_request_email", "build_accepted_email", "build_rejected_email",
]
