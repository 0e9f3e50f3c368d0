"""
Timestamp and date-filter helpers.

Backend timestamps are ISO-8601 strings, sometimes with a trailing 'Z',
sometimes naive. Aware timestamps are shown in the dashboard's local time.
"""

import calendar
import logging
from datetime import date, datetime

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None if it is not one."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed


def extract_time_from_timestamp(timestamp: str) -> str:
    """
    Reduce a timestamp to HH:MM:SS for list display.

    Returns "" for empty input and the original string if it cannot be parsed.
    """
    if not timestamp:
        return ""

    parsed = parse_timestamp(timestamp)
    if parsed is None:
        logger.warning(f"Invalid timestamp: {timestamp}")
        return timestamp

    return parsed.strftime("%H:%M:%S")


def format_datetime(value: str) -> str:
    """Format a timestamp as 'YYYY. MM. DD. HH:MM:SS' (ko-KR style)."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return parsed.strftime("%Y. %m. %d. %H:%M:%S")


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def validate_date_range(
    date_from: str | None,
    date_to: str | None,
    today: date | None = None,
) -> bool:
    """
    Check a detection-history date filter.

    Either bound left empty means no filter and is accepted. Otherwise the
    start must not be after the end and neither may lie in the future.
    """
    if not date_from or not date_to:
        return True

    start = _parse_date(date_from)
    end = _parse_date(date_to)
    if start is None or end is None:
        return False

    today = today or date.today()
    if start > end:
        return False
    if start > today or end > today:
        return False
    return True


def subtract_month(day: date) -> date:
    """Same day one month earlier, clamped to the end of the shorter month."""
    year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def default_date_filter(today: date | None = None) -> dict[str, str]:
    """Default history filter: the last month up to today."""
    today = today or date.today()
    return {
        "date_from": subtract_month(today).isoformat(),
        "date_to": today.isoformat(),
    }
