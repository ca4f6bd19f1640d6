"""Date and time encoding used by the HAFAS client interface."""

import re
from datetime import date, datetime, time, timedelta
from typing import Any

# Optional two-digit day offset, then HHMMSS.
P_JSON_TIME = re.compile(r"(\d{2})?(\d{2})(\d{2})(\d{2})")
P_JSON_DATE = re.compile(r"(\d{4})-?(\d{2})-?(\d{2})")


def parse_hci_date(text: str) -> date:
    """Parse 'YYYYMMDD' (dashes tolerated).

    Raises:
        ValueError: If the text is not a date.
    """
    match = P_JSON_DATE.fullmatch(text)
    if not match:
        raise ValueError(f"cannot parse date: '{text}'")
    return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def parse_hci_time(base_date: date, text: str | None, tz: Any) -> datetime | None:
    """Combine a base date with a '[dd]HHMMSS' time in the backend's timezone.

    Raises:
        ValueError: If the text does not match the time pattern.
    """
    if text is None:
        return None
    match = P_JSON_TIME.fullmatch(text)
    if not match:
        raise ValueError(f"cannot parse time: '{text}'")
    day = base_date
    if match.group(1):
        day = day + timedelta(days=int(match.group(1)))
    local = datetime.combine(
        day, time(int(match.group(2)), int(match.group(3)), int(match.group(4)))
    )
    return tz.localize(local)


def _to_local(value: datetime, tz: Any) -> datetime:
    # Naive datetimes are taken as wall clock time of the backend.
    if value.tzinfo is None:
        return value
    return value.astimezone(tz)


def format_hci_date(value: datetime, tz: Any) -> str:
    local = _to_local(value, tz)
    return f"{local.year:04d}{local.month:02d}{local.day:02d}"


def format_hci_time(value: datetime, tz: Any) -> str:
    local = _to_local(value, tz)
    return f"{local.hour:02d}{local.minute:02d}00"
