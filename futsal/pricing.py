"""
Tiered hourly pricing.

A field carries a list of tiers (day type, [start_hour, end_hour), price per
hour). A booking is priced by walking its interval hour by hour in the venue's
wall-clock time, so intervals that cross a tier edge or midnight into another
day type are charged per part.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol
from zoneinfo import ZoneInfo

from futsal.errors import BadRequest, NoPriceConfigured
from futsal.models import DayType
from futsal.slots import local_tz

_SECONDS_PER_HOUR = Decimal(3600)


class PriceTier(Protocol):
    day_type: DayType | str
    start_hour: int
    end_hour: int
    price: int


def day_type_of(dt: datetime) -> DayType:
    # Saturday=5, Sunday=6
    return DayType.WEEKEND if dt.weekday() >= 5 else DayType.WEEKDAY


def find_tier(tiers: Iterable[PriceTier], day_type: DayType, hour: int) -> PriceTier | None:
    for tier in tiers:
        if tier.day_type == day_type and tier.start_hour <= hour < tier.end_hour:
            return tier
    return None


def price_per_hour_for_slot(
    tiers: Sequence[PriceTier],
    slot_start: datetime,
    tz: ZoneInfo | None = None,
) -> int | None:
    local = slot_start.astimezone(tz or local_tz())
    tier = find_tier(tiers, day_type_of(local), local.hour)
    return tier.price if tier else None


def _next_local_hour(instant: datetime, tz: ZoneInfo) -> datetime:
    """Next wall-clock hour boundary after `instant`, as a UTC datetime."""
    floored = instant.astimezone(tz).replace(minute=0, second=0, microsecond=0)
    return floored.astimezone(timezone.utc) + timedelta(hours=1)


def calculate_price(
    tiers: Sequence[PriceTier],
    start: datetime,
    end: datetime,
    tz: ZoneInfo | None = None,
) -> int:
    """Total price of [start, end), rounded half-up to whole currency units."""
    tz = tz or local_tz()
    if not tiers:
        raise NoPriceConfigured("This field has no price configuration yet")
    if end <= start:
        raise BadRequest("end_time must be after start_time")

    total = Decimal(0)
    current = start.astimezone(timezone.utc)
    end_utc = end.astimezone(timezone.utc)

    while current < end_utc:
        segment_end = min(_next_local_hour(current, tz), end_utc)
        local = current.astimezone(tz)
        day_type = day_type_of(local)

        tier = find_tier(tiers, day_type, local.hour)
        if tier is None:
            raise NoPriceConfigured(
                f"No price available for {day_type} at {local.hour:02d}:00"
            )

        seconds = Decimal(int((segment_end - current).total_seconds()))
        total += Decimal(tier.price) * seconds / _SECONDS_PER_HOUR
        current = segment_end

    return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Tier validation
# ---------------------------------------------------------------------------


def tiers_overlap(a: PriceTier, b: PriceTier) -> bool:
    return (
        a.day_type == b.day_type
        and a.start_hour < b.end_hour
        and a.end_hour > b.start_hour
    )


def validate_price_range(start_hour: int, end_hour: int, price: int) -> None:
    if not 0 <= start_hour <= 23:
        raise BadRequest("start_hour must be between 0 and 23")
    if not 1 <= end_hour <= 24:
        raise BadRequest("end_hour must be between 1 and 24")
    if end_hour <= start_hour:
        raise BadRequest("end_hour must be greater than start_hour")
    if price < 0:
        raise BadRequest("price must not be negative")


def ensure_no_overlap_in_payload(tiers: Sequence[PriceTier]) -> None:
    for i, a in enumerate(tiers):
        validate_price_range(a.start_hour, a.end_hour, a.price)
        for b in tiers[i + 1 :]:
            if tiers_overlap(a, b):
                raise BadRequest(
                    f"Overlapping prices in payload: {a.day_type} "
                    f"({a.start_hour}-{a.end_hour}) overlaps "
                    f"({b.start_hour}-{b.end_hour})"
                )
