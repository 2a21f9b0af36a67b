"""
Slot resolution: turn the different ways a client can describe a time window
into one canonical half-open interval [start, end).

Supported shapes:
  - explicit ISO start/end pair
  - date (YYYY-MM-DD) + start hour + duration, with defaults
    (today, next full hour, 1 hour)
  - for bookings: ISO start or time-of-day ("14:00" / "14.00") + order date,
    plus a duration
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from futsal import settings
from futsal.errors import InvalidSlot

MAX_SLOT_HOURS = 24

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_OF_DAY_RE = re.compile(r"^(\d{1,2})[:.](\d{2})$")


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.APP_TIMEZONE)


def to_utc(dt: datetime) -> datetime:
    """UTC-aware copy; naive input is taken as UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _aware(dt: datetime, tz: ZoneInfo) -> datetime:
    """Naive datetimes are read as wall-clock time in the venue timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt


def round_up_to_next_hour(dt: datetime) -> datetime:
    floored = dt.replace(minute=0, second=0, microsecond=0)
    if floored == dt:
        return dt
    return floored + timedelta(hours=1)


def parse_local_date(value: str) -> date:
    if not _DATE_RE.match(value):
        raise InvalidSlot("date must use the YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidSlot(f"Invalid date: {value}") from None


def parse_datetime(value: str, name: str = "datetime") -> datetime:
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise InvalidSlot(f"{name} must be an ISO-8601 datetime") from None


def parse_time_of_day(value: str) -> time | None:
    """Return the time for "HH:MM" / "HH.MM" input, None when it isn't one."""
    match = _TIME_OF_DAY_RE.match(value.strip())
    if not match:
        return None
    hh, mm = int(match.group(1)), int(match.group(2))
    if hh > 23 or mm > 59:
        raise InvalidSlot("Invalid time of day for start_time")
    return time(hh, mm)


def _wall_clock(day: date, at: time, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, at, tzinfo=tz)


def resolve_slot(
    start_time: datetime | str | None = None,
    end_time: datetime | str | None = None,
    date_str: str | None = None,
    start_hour: int | None = None,
    duration_hours: int | None = None,
    now: datetime | None = None,
    tz: ZoneInfo | None = None,
) -> Slot:
    """
    Resolve a query-style slot.

    An explicit start/end pair wins. Otherwise the slot is built from
    `date_str` (default: today), `start_hour` (default: 08 when a date is
    given, else the next full hour) and `duration_hours` (default: 1).
    """
    tz = tz or local_tz()

    if start_time is not None or end_time is not None:
        if start_time is None or end_time is None:
            raise InvalidSlot("start_time and end_time must be provided together")
        if isinstance(start_time, str):
            start_time = parse_datetime(start_time, "start_time")
        if isinstance(end_time, str):
            end_time = parse_datetime(end_time, "end_time")
        start = _aware(start_time, tz)
        end = _aware(end_time, tz)
        if end <= start:
            raise InvalidSlot("end_time must be after start_time")
        if end - start > timedelta(hours=MAX_SLOT_HOURS):
            raise InvalidSlot(f"A slot can span at most {MAX_SLOT_HOURS} hours")
        return Slot(start=start, end=end)

    current = (now or datetime.now(timezone.utc)).astimezone(tz)
    next_hour = round_up_to_next_hour(current)

    if date_str:
        day = parse_local_date(date_str)
        hour = 8 if start_hour is None else start_hour
    else:
        day = next_hour.date()
        hour = next_hour.hour if start_hour is None else start_hour

    duration = 1 if duration_hours is None else duration_hours
    if not 0 <= hour <= 23:
        raise InvalidSlot("start_hour must be between 0 and 23")
    if duration < 1:
        raise InvalidSlot("duration_hours must be at least 1")
    if hour + duration > 24:
        raise InvalidSlot("Slot crosses the day boundary (24h)")

    start = _wall_clock(day, time(hour), tz)
    return Slot(start=start, end=start + timedelta(hours=duration))


def resolve_booking_slot(
    start_time: str | None = None,
    end_time: str | None = None,
    order_date: str | None = None,
    start_hour: int | None = None,
    duration_hours: int | None = None,
    now: datetime | None = None,
    tz: ZoneInfo | None = None,
) -> Slot:
    """
    Resolve the slot of a booking request.

    `start_time` is either an ISO datetime or a time of day that is combined
    with `order_date`. Without `start_time` the query-style resolution of
    `resolve_slot` applies.
    """
    tz = tz or local_tz()

    if start_time is None:
        if end_time is not None:
            raise InvalidSlot("start_time and end_time must be provided together")
        return resolve_slot(
            date_str=order_date,
            start_hour=start_hour,
            duration_hours=duration_hours,
            now=now,
            tz=tz,
        )

    at = parse_time_of_day(start_time)
    if at is not None:
        if not order_date:
            raise InvalidSlot("order_date is required when start_time is a time of day")
        start = _wall_clock(parse_local_date(order_date), at, tz)
    else:
        start = _aware(parse_datetime(start_time, "start_time"), tz)

    if end_time is not None:
        return resolve_slot(start_time=start, end_time=end_time, tz=tz)

    duration = 1 if duration_hours is None else duration_hours
    if not 1 <= duration <= MAX_SLOT_HOURS:
        raise InvalidSlot(f"duration_hours must be between 1 and {MAX_SLOT_HOURS}")
    return Slot(start=start, end=start + timedelta(hours=duration))
