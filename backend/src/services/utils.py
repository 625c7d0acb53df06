"""Shared utility functions for service layer."""
from sqlalchemy.exc import IntegrityError

# Phrasing PostgreSQL (and most drivers) use when a unique constraint is violated
_UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate key")


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    PostgreSQL LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def is_unique_violation(exc: IntegrityError, constraint_name: str | None = None) -> bool:
    """
    Check whether an IntegrityError is a unique-constraint violation.

    When `constraint_name` is given only a violation of that constraint matches;
    otherwise any unique violation (by the generic driver phrasing) does.
    """
    message = str(exc.orig if exc.orig is not None else exc).lower()
    if constraint_name is not None:
        return constraint_name.lower() in message
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)
