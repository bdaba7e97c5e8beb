"""
Input validators — framework-agnostic, pure functions.
"""

from __future__ import annotations

from typing import Optional

import validators as _validators

MAX_PASSWORD_LENGTH = 128


def normalize_email(email: Optional[str]) -> str:
    """Strip and lowercase *email*; ``None`` becomes an empty string."""
    return (email or "").strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* is a syntactically valid address."""
    if not email:
        return False
    return bool(_validators.email(email))


def validate_password(password: Optional[str]) -> bool:
    """Return True if *password* is present and not longer than 128 characters.

    No complexity rules are enforced.
    """
    return bool(password) and len(password) <= MAX_PASSWORD_LENGTH
