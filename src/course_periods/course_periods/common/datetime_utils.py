from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Union

from ..core.constants import DATE_FORMAT, TIME_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_iso() -> str:
    """Today's local date as YYYY-MM-DD (the format rule dates are compared in)."""
    return now_local().date().strftime(DATE_FORMAT)


def normalize_iso_date(value: Union[str, date, None], field_name: str) -> Optional[str]:
    """Validate a date given as string or date and return it as YYYY-MM-DD."""

    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    try:
        return parse_iso_date(str(value).strip()).strftime(DATE_FORMAT)
    except ValueError:
        raise ValidationError(f"{field_name} không hợp lệ (YYYY-MM-DD)")


def parse_time(value: Union[str, time, None], field_name: str) -> time:
    """Accept HH:MM or HH:MM:SS."""

    if isinstance(value, time):
        return value
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} không hợp lệ (HH:MM)")
    v = (value or "").strip()
    for fmt in (TIME_FORMAT, "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} không hợp lệ (HH:MM)")


def format_time(value: time) -> str:
    return value.strftime(TIME_FORMAT)
