"""
Centralized configuration with environment variable overrides.

Scheduling thresholds, the admin allow-list and mail settings are all
configurable here. Nothing is hardcoded in the engine or handler logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from venue_booking.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAILS = "doaa@iitbhu.ac.in,dosa@iitbhu.ac.in,registrar@iitbhu.ac.in"
LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_list(env_var: str, default: str) -> tuple[str, ...]:
    """Parse a comma-separated env var into a tuple of lowercase entries."""
    raw = os.getenv(env_var, default)
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class BookingConfig:
    """Scheduling and request validation settings."""

    buffer_minutes: int = _safe_int("NEARBY_BUFFER_MINUTES", "60")
    institute_email_domain: str = os.getenv("INSTITUTE_EMAIL_DOMAIN", "@itbhu.ac.in")
    phone_digits: int = _safe_int("PHONE_DIGITS", "10")
    max_duration_minutes: int = _safe_int("MAX_DURATION_MINUTES", "1440")


@dataclass(frozen=True)
class AdminConfig:
    """Administrators allowed to approve or reject bookings."""

    admin_emails: tuple[str, ...] = _safe_list("ADMIN_EMAILS", DEFAULT_ADMIN_EMAILS)


@dataclass(frozen=True)
class MailConfig:
    """Outgoing notification settings."""

    from_email: str = os.getenv("MAIL_FROM", "noreply@yourdomain.com")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")
    resend_api_key: str = os.getenv("RESEND_API_KEY", "")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    booking: BookingConfig = field(default_factory=BookingConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    mail: MailConfig = field(default_factory=MailConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "venue-booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.booking.buffer_minutes < 0:
        raise ValueError(
            f"NEARBY_BUFFER_MINUTES must be >= 0, got {config.booking.buffer_minutes}"
        )
    if config.booking.phone_digits < 1:
        raise ValueError(
            f"PHONE_DIGITS must be >= 1, got {config.booking.phone_digits}"
        )
    if config.booking.max_duration_minutes < 1:
        raise ValueError(
            "MAX_DURATION_MINUTES must be >= 1, "
            f"got {config.booking.max_duration_minutes}"
        )
    if not config.booking.institute_email_domain.startswith("@"):
        raise ValueError(
            "INSTITUTE_EMAIL_DOMAIN must start with '@', "
            f"got {config.booking.institute_email_domain!r}"
        )
    if not config.admin.admin_emails:
        raise ValueError("ADMIN_EMAILS must list at least one address")
    if not config.mail.public_base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"PUBLIC_BASE_URL must be an http(s) URL, got {config.mail.public_base_url!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
