"""Administrator authorization by email allow-list."""

import logging
from typing import Iterable, Optional

from venue_booking.config import settings
from venue_booking.utils import normalize_email

logger = logging.getLogger(__name__)


class AdminAuthorizationError(Exception):
    """Raised when a caller may not perform an admin action."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class AdminGuard:
    """Allows admin actions only for emails on the configured allow-list."""

    def __init__(self, admin_emails: Optional[Iterable[str]] = None) -> None:
        emails = settings.admin.admin_emails if admin_emails is None else admin_emails
        self._admins = frozenset(normalize_email(e) for e in emails)

    @property
    def admin_emails(self) -> frozenset[str]:
        return self._admins

    def is_admin(self, user_email: Optional[str]) -> bool:
        return bool(user_email) and normalize_email(user_email) in self._admins

    def require_admin(self, user_email: Optional[str]) -> str:
        """Return the normalized admin email or raise.

        Raises:
            AdminAuthorizationError: 401 when no user is authenticated,
                403 when the user is not an administrator.
        """
        if not user_email:
            logger.warning("Unauthorized access attempt - user is not authenticated")
            raise AdminAuthorizationError("Unauthorized", status_code=401)
        email = normalize_email(user_email)
        if email not in self._admins:
            logger.warning("Unauthorized access attempt by %s", email)
            raise AdminAuthorizationError("Unauthorized", status_code=403)
        logger.info("Admin access granted to %s", email)
        return email
