"""Normalization and validation of user-supplied invite fields."""

import re

from app.core.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CUSTOM_CODE_RE = re.compile(r"^[A-Z0-9-]{4,20}$")
MIN_NAME_LENGTH = 2


def normalize_code(raw: object) -> str:
    """Codes are case-insensitive: trim and uppercase before any lookup."""
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Invite code is required")
    return raw.strip().upper()


def normalize_email(raw: object) -> str:
    if not isinstance(raw, str):
        raise ValidationError("Please enter a valid email address")
    email = raw.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address")
    return email


def normalize_name(raw: object) -> str:
    if not isinstance(raw, str):
        raise ValidationError("Please enter your full name (at least 2 characters)")
    name = raw.strip()
    if len(re.sub(r"\s", "", name)) < MIN_NAME_LENGTH:
        raise ValidationError("Please enter your full name (at least 2 characters)")
    return name


def normalize_custom_code(raw: str) -> str:
    code = raw.strip().upper()
    if not CUSTOM_CODE_RE.match(code):
        raise ValidationError(
            "Code must be 4-20 characters, letters, numbers, and hyphens only"
        )
    return code
