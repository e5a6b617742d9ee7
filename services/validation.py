"""
Input checks shared by the service operations. Each helper returns the
cleaned value or raises ValidationError with a message fit for the user.
"""

from datetime import date, datetime

from constants import (
    Priority, Category, MAX_TITLE_LENGTH, MAX_TEXT_LENGTH, MAX_ESTIMATED_MINUTES
)
from error_handler import ValidationError

DATE_FORMATS = ('%Y-%m-%d', '%m/%d/%Y')


def clean_text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_title(value, label='Title'):
    title = clean_text(value)
    if not title:
        raise ValidationError(f"{label} is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"{label} must be at most {MAX_TITLE_LENGTH} characters")
    return title


def optional_long_text(value, label='Description'):
    text = clean_text(value)
    if text and len(text) > MAX_TEXT_LENGTH:
        raise ValidationError(f"{label} must be at most {MAX_TEXT_LENGTH} characters")
    return text


def parse_date(value, label='Date'):
    """Accept a date, a datetime, YYYY-MM-DD or MM/DD/YYYY. Empty -> None."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"{label} '{value}' is not a valid date (use YYYY-MM-DD or MM/DD/YYYY)")


def parse_priority(value):
    if value is None or value == '':
        return Priority.MEDIUM.value
    try:
        return Priority(str(value).strip().upper()).value
    except ValueError:
        raise ValidationError(f"Invalid priority: {value} (use LOW, MEDIUM or HIGH)")


def parse_category(value):
    if value is None or value == '':
        return None
    try:
        return Category(str(value).strip().upper()).value
    except ValueError:
        raise ValidationError(f"Invalid category: {value}")


def parse_estimated_minutes(value):
    if value is None or value == '':
        return None
    try:
        minutes = int(float(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Estimated minutes must be a number, got '{value}'")
    if minutes < 1 or minutes > MAX_ESTIMATED_MINUTES:
        raise ValidationError(f"Estimated minutes must be between 1 and {MAX_ESTIMATED_MINUTES}")
    return minutes


def parse_int(value, label):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number")
