"""Datetime parsing helpers for form settings, events and date fields."""

from __future__ import annotations

from datetime import date, datetime, timezone

DATETIME_FORMATS: list[str] = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M %p",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
]

DATE_FORMATS = ("yyyy-mm-dd", "mm/dd/yyyy", "dd/mm/yyyy", "dd/mm")
DEFAULT_DATE_FORMAT = "yyyy-mm-dd"


def parse_datetime_value(raw_value: str | None) -> datetime | None:
    """Parse ISO 8601 or a handful of common layouts; None when unparseable."""
    if not raw_value or not isinstance(raw_value, str):
        return None
    value = raw_value.strip()
    if not value:
        return None

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def is_valid_date(raw_value: str | None) -> bool:
    return parse_datetime_value(raw_value) is not None


def format_date(raw_value: str | None, date_format: str | None = None) -> str:
    """Render a date per a form's configured format; "" when unparseable."""
    parsed = parse_datetime_value(raw_value)
    if parsed is None:
        return ""
    day = f"{parsed.day:02d}"
    month = f"{parsed.month:02d}"
    year = parsed.year

    if date_format == "mm/dd/yyyy":
        return f"{month}/{day}/{year}"
    if date_format == "dd/mm/yyyy":
        return f"{day}/{month}/{year}"
    if date_format == "dd/mm":
        return f"{day}/{month}"
    return f"{year}-{month}-{day}"


def as_aware(value: datetime | date) -> datetime:
    """Treat naive timestamps (and bare dates) as UTC."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
