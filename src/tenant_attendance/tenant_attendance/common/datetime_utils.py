from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}, expected YYYY-MM-DD")


def parse_duration(value: str) -> timedelta:
    """Parse expiry strings such as '15m', '7d' or '30s'."""
    match = _DURATION_RE.match(str(value).strip())
    if not match:
        raise ValidationError(f"Invalid expiry format: {value!r}")
    amount, unit = int(match.group(1)), match.group(2)
    return timedelta(**{_DURATION_UNITS[unit]: amount})


def now_utc() -> datetime:
    """Default clock for services; tests inject their own."""
    return datetime.now(timezone.utc)


def day_in_zone(moment: datetime, tz: ZoneInfo) -> date:
    """Calendar day of `moment` as seen from `tz`."""
    return moment.astimezone(tz).date()


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    """Midnight of `day` in `tz`, expressed in UTC."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def to_db(moment: Optional[datetime]) -> Optional[datetime]:
    # MySQL DATETIME columns hold naive UTC.
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
