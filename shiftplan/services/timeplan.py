"""Civil time-of-day, date and week-window helpers.

Every "today"/"now" computation takes the timezone explicitly.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional, Union

import pandas as pd

from shiftplan.exceptions import ValidationError

TimeLike = Union[dt.time, str]
DateLike = Union[dt.date, str]


def parse_time_string(value: str) -> dt.time:
    """Parse "HH:MM" or "HH:MM:SS" into a time. Raises ValueError on bad input."""
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return dt.time(hour, minute, second)


def to_minutes(value) -> Optional[int]:
    """
    Minute-of-day for a time value, or None if the value is missing or malformed.

    Accepts ``datetime.time``, ``datetime.datetime`` / ``pd.Timestamp`` (time part)
    and "HH:MM[:SS]" strings. Seconds are dropped.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.hour * 60 + value.minute
    if isinstance(value, dt.time):
        return value.hour * 60 + value.minute
    try:
        t = parse_time_string(value)
    except (TypeError, ValueError):
        return None
    return t.hour * 60 + t.minute


def coerce_time(value: TimeLike, field: str = "time") -> dt.time:
    """Convert input to a time or raise ValidationError."""
    if isinstance(value, dt.datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, dt.time):
        return value
    try:
        return parse_time_string(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}: {value!r}") from e


def coerce_date(value: DateLike, field: str = "date") -> dt.date:
    """
    Convert input to a date or raise ValidationError.

    Supports ``date``, ``datetime``, ``pd.Timestamp`` and ISO-like strings.
    """
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            parsed = pd.Timestamp(value.strip())
        except ValueError as e:
            raise ValidationError(f"Could not parse {field} {value!r}") from e
        if pd.isna(parsed):
            raise ValidationError(f"Could not parse {field} {value!r}")
        return parsed.date()
    raise ValidationError(f"Unsupported {field} type: {type(value).__name__}")


def safe_date(value) -> Optional[dt.date]:
    """Like coerce_date but returns None instead of raising."""
    if value is None:
        return None
    try:
        return coerce_date(value)
    except ValidationError:
        return None


def format_hm(value) -> str:
    """Format a time value as "HH:MM" ("--:--" if missing)."""
    minutes = to_minutes(value)
    if minutes is None:
        return "--:--"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def now_in_zone(tz: str) -> dt.datetime:
    """Current wall-clock datetime in ``tz`` (timezone-aware)."""
    return pd.Timestamp.now(tz=tz).to_pydatetime()


def to_zone(moment: dt.datetime, tz: str) -> dt.datetime:
    """
    Wall-clock view of ``moment`` in ``tz``.

    Aware datetimes are converted; naive ones are taken as already civil in ``tz``.
    """
    if moment.tzinfo is None:
        return moment
    return pd.Timestamp(moment).tz_convert(tz).to_pydatetime()


def today_in_zone(tz: str) -> dt.date:
    """Current civil date in ``tz``."""
    return now_in_zone(tz).date()


def day_of_week(day: dt.date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class WeekWindow:
    """Seven consecutive dates, Monday first (ISO week)."""

    start: dt.date
    end: dt.date

    @property
    def dates(self) -> List[dt.date]:
        return [self.start + dt.timedelta(days=i) for i in range(7)]

    @property
    def week_id(self) -> str:
        year, week, _ = self.start.isocalendar()
        return f"{year}-W{week:02d}"

    def __contains__(self, day: dt.date) -> bool:
        return self.start <= day <= self.end


def week_containing(day: DateLike) -> WeekWindow:
    """ISO week (Monday..Sunday) that contains ``day``."""
    d = coerce_date(day)
    start = d - dt.timedelta(days=d.weekday())
    return WeekWindow(start=start, end=start + dt.timedelta(days=6))


def week_window(offset: int = 0, tz: str = "Europe/Bucharest", today: Optional[DateLike] = None) -> WeekWindow:
    """
    ISO week ``offset`` weeks away from the week containing today.

    Args:
        offset: 0 for the current week, -1 for last week, 1 for next week
        tz: Timezone used to determine "today"
        today: Override of today's date (for tests and replays)
    """
    base = coerce_date(today) if today is not None else today_in_zone(tz)
    return week_containing(base + dt.timedelta(weeks=int(offset)))


def week_from_id(week_id: str) -> WeekWindow:
    """Week window for an ISO week identifier such as "2025-W48"."""
    try:
        year_part, week_part = week_id.strip().upper().split("-W")
        start = dt.date.fromisocalendar(int(year_part), int(week_part), 1)
    except ValueError as e:
        raise ValidationError(f"Invalid ISO week id {week_id!r} (expected YYYY-Www)") from e
    return WeekWindow(start=start, end=start + dt.timedelta(days=6))

