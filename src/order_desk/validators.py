"""Reusable field validators shared by the schemas and the CRUD functions."""
import math
import re
from typing import Optional

from sqlalchemy.orm import Session

from .errors import ConflictError, ValidationError

NAME_RE = re.compile(r"^[A-Za-zÀ-ÖØ-öø-ÿ\s'-]+$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{1,20}$")


def required_text(value, field: str):
    """Reject None and blank strings; strips surrounding whitespace."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required and cannot be empty.")
    if isinstance(value, str):
        return value.strip()
    return value


def require_id(value, field: str = "id") -> int:
    """Parse a positive integer id from an int or a string of digits."""
    if isinstance(value, int) and not isinstance(value, bool):
        if value > 0:
            return value
    elif isinstance(value, str) and value.strip().isdecimal():
        parsed = int(value.strip())
        if parsed > 0:
            return parsed
    raise ValidationError(f"Invalid {field}: {value!r}. {field} must be a positive number.")


def positive_int(value, field: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    if isinstance(value, str) and value.strip().isdecimal() and int(value.strip()) > 0:
        return int(value.strip())
    raise ValidationError(f"{field} must be a positive integer.")


def finite(value, field: str):
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number.")
    return value


def non_negative(value, field: str):
    finite(value, field)
    if value < 0:
        raise ValidationError(f"{field} must be >= 0")
    return value


def positive(value, field: str):
    finite(value, field)
    if value <= 0:
        raise ValidationError(f"{field} must be a positive number.")
    return value


def matches(value: str, pattern, message: str) -> str:
    if not pattern.match(value):
        raise ValidationError(message)
    return value


def ensure_unique(db: Session, column, value, message: str, exclude_id: Optional[int] = None) -> None:
    """Raise ConflictError if another row already holds `value` in `column`.

    `exclude_id` skips the row being updated so it may keep its own value.
    """
    model = column.class_
    query = db.query(model.id).filter(column == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(message)
