"""
auth/policy.py -- Password strength policy for new accounts.

A password must be at least 8 characters long and contain a digit, a
lowercase letter, an uppercase letter and a non-alphanumeric character. All
five conditions live in one composite pattern so there is exactly one place
that defines "strong enough".
"""

from __future__ import annotations

import re

from auth.errors import ValidationError
from auth.passwords import MAX_PASSWORD_BYTES

_STRONG_PASSWORD_RE = re.compile(r"(?=.*\d)(?=.*[a-z])(?=.*[A-Z])(?=.*[^a-zA-Z0-9]).{8,}", re.DOTALL)

WEAK_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters long and contain at least one digit, "
    "one uppercase letter, one lowercase letter, and one special character."
)


def is_strong_password(password: str) -> bool:
    return _STRONG_PASSWORD_RE.fullmatch(password) is not None


def check_password_strength(password: str) -> None:
    """Raise ValidationError with a descriptive message if the password is too weak."""
    if not is_strong_password(password):
        raise ValidationError(WEAK_PASSWORD_MESSAGE, code="weak_password")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.",
            code="password_too_long",
        )
