from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

import pytest

from futsal.availability import BLOCKING_STATUSES, find_conflict, is_blocking, overlaps
from futsal.models import BookingStatus

from .factories import NOW

H = timedelta(hours=1)


@dataclass
class FakeBooking:
    start_time: datetime
    end_time: datetime
    status: BookingStatus = BookingStatus.PENDING


class TestOverlaps:
    @pytest.mark.parametrize(
        ("other_start", "other_end"),
        [
            (NOW, NOW + 2 * H),  # identical
            (NOW - H, NOW + H),  # covers the start
            (NOW + H, NOW + 3 * H),  # covers the end
            (NOW + 30 * timedelta(minutes=1), NOW + H),  # inside
            (NOW - H, NOW + 3 * H),  # around
        ],
    )
    def test_intersecting(self, other_start, other_end):
        assert overlaps(NOW, NOW + 2 * H, other_start, other_end)

    @pytest.mark.parametrize(
        ("other_start", "other_end"),
        [
            (NOW + 2 * H, NOW + 3 * H),  # starts at our end
            (NOW - H, NOW),  # ends at our start
            (NOW + 5 * H, NOW + 6 * H),
        ],
    )
    def test_adjacent_or_disjoint(self, other_start, other_end):
        assert not overlaps(NOW, NOW + 2 * H, other_start, other_end)


class TestBlockingStatuses:
    def test_only_cancelled_releases_the_slot(self):
        assert BLOCKING_STATUSES == set(BookingStatus) - {BookingStatus.CANCELLED}

    def test_accepts_raw_strings(self):
        assert is_blocking("PAID")
        assert not is_blocking("CANCELLED")


class TestFindConflict:
    def test_returns_overlapping_booking(self):
        existing = FakeBooking(NOW + H, NOW + 2 * H, BookingStatus.WAITING_PAYMENT)
        assert find_conflict(NOW, NOW + 2 * H, [existing]) is existing

    def test_cancelled_booking_does_not_conflict(self):
        existing = FakeBooking(NOW, NOW + 2 * H, BookingStatus.CANCELLED)
        assert find_conflict(NOW, NOW + 2 * H, [existing]) is None

    def test_adjacent_booking_does_not_conflict(self):
        existing = FakeBooking(NOW + 2 * H, NOW + 3 * H)
        assert find_conflict(NOW, NOW + 2 * H, [existing]) is None

    def test_completed_booking_still_blocks(self):
        existing = FakeBooking(NOW, NOW + H, BookingStatus.COMPLETED)
        assert find_conflict(NOW, NOW + 2 * H, [existing]) is existing
