"""Text normalization and validation helpers for applicant input."""

from __future__ import annotations

import re
from typing import Optional

# Runs of whitespace and the separators used in position titles.
_POSITION_SEPARATORS = re.compile(r"[\s/&\-]+")
_WHITESPACE = re.compile(r"\s+")

_EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_PHONE_ALLOWED = re.compile(r"^\+?[0-9()\-.\s]+$")
_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")

MAX_NAME_LENGTH = 100
MAX_COVER_LETTER_LENGTH = 5000


def normalize_position(value: Optional[str]) -> str:
    """Map a free-text position title to its canonical lookup key.

    ``"Warehouse Staff & Forklift Operators"`` becomes
    ``"warehouse staff forklift operators"``. The same transform must be used
    wherever questions are looked up, otherwise question keys drift between
    the start and interview steps.
    """
    if not value:
        return ""
    lowered = value.strip().lower()
    spaced = _POSITION_SEPARATORS.sub(" ", lowered)
    return _WHITESPACE.sub(" ", spaced).strip()


def clean_field(value: Optional[str]) -> str:
    """Trim a submitted form value, treating None as empty."""
    return (value or "").strip()


def is_valid_email(value: str) -> bool:
    """Return True when the value looks like a deliverable email address."""
    return bool(value) and len(value) <= 254 and bool(_EMAIL_PATTERN.match(value))


def is_valid_phone(value: str) -> bool:
    """Accept 7-15 digits with the usual punctuation, optionally prefixed by +."""
    if not value or not _PHONE_ALLOWED.match(value):
        return False
    digits = sum(1 for char in value if char.isdigit())
    return 7 <= digits <= 15


def sanitize_key_fragment(value: Optional[str]) -> str:
    """Replace every non-alphanumeric character so the value is safe inside a store key."""
    return _NON_ALPHANUMERIC.sub("_", value or "")
