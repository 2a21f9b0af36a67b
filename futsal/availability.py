from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from futsal.models import BookingStatus

# Every state but CANCELLED holds the slot, on both the booking and the
# mobile availability paths.
BLOCKING_STATUSES: frozenset[BookingStatus] = frozenset(
    s for s in BookingStatus if s != BookingStatus.CANCELLED
)


class TimedBooking(Protocol):
    start_time: datetime
    end_time: datetime
    status: BookingStatus | str


def overlaps(
    start: datetime,
    end: datetime,
    other_start: datetime,
    other_end: datetime,
) -> bool:
    """Half-open interval overlap; touching intervals do not overlap."""
    return other_start < end and other_end > start


def is_blocking(status: BookingStatus | str) -> bool:
    return BookingStatus(status) in BLOCKING_STATUSES


def find_conflict(
    start: datetime,
    end: datetime,
    bookings: Iterable[TimedBooking],
) -> TimedBooking | None:
    """Return the first blocking booking overlapping [start, end), if any."""
    for booking in bookings:
        if is_blocking(booking.status) and overlaps(
            start, end, booking.start_time, booking.end_time
        ):
            return booking
    return None
