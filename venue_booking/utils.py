"""Shared utilities used across the venue booking tracker."""

import re


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("98765 43210")
        '9876543210'
        >>> normalize_phone("+91 (987) 654-3210")
        '+919876543210'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def normalize_email(value: str) -> str:
    """Lowercase and trim an email address for allow-list comparisons."""
    return value.strip().lower()


def format_window(start: str, duration_minutes: int) -> str:
    """Human-readable timing used in notifications, e.g. ``14:00 (90 min)``."""
    return f"{start} ({duration_minutes} min)"
