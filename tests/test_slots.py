from __future__ import annotations

from datetime import datetime, time, timedelta

import pytest

from futsal.errors import InvalidSlot
from futsal.slots import (
    parse_local_date,
    parse_time_of_day,
    resolve_booking_slot,
    resolve_slot,
    round_up_to_next_hour,
)

from .factories import JAKARTA, NOW, local


class TestRoundUpToNextHour:
    def test_exact_hour_is_kept(self):
        assert round_up_to_next_hour(local(2026, 6, 1, 17)) == local(2026, 6, 1, 17)

    def test_partial_hour_rounds_up(self):
        assert round_up_to_next_hour(local(2026, 6, 1, 17, 1)) == local(2026, 6, 1, 18)

    def test_seconds_count(self):
        dt = local(2026, 6, 1, 17).replace(second=1)
        assert round_up_to_next_hour(dt) == local(2026, 6, 1, 18)


class TestParsing:
    def test_valid_date(self):
        assert parse_local_date("2026-06-02").isoformat() == "2026-06-02"

    @pytest.mark.parametrize("value", ["2026/06/02", "02-06-2026", "2026-6-2", ""])
    def test_wrong_format(self, value):
        with pytest.raises(InvalidSlot):
            parse_local_date(value)

    def test_impossible_date(self):
        with pytest.raises(InvalidSlot):
            parse_local_date("2026-02-30")

    @pytest.mark.parametrize("value", ["14:00", "14.00", " 14:00 "])
    def test_time_of_day_separators(self, value):
        assert parse_time_of_day(value) == time(14, 0)

    def test_iso_string_is_not_a_time_of_day(self):
        assert parse_time_of_day("2026-06-02T14:00:00") is None

    @pytest.mark.parametrize("value", ["24:00", "12:60"])
    def test_out_of_range_time_of_day(self, value):
        with pytest.raises(InvalidSlot):
            parse_time_of_day(value)


class TestResolveSlotExplicit:
    def test_pair_is_returned_as_is(self):
        slot = resolve_slot(
            start_time="2026-06-02T10:00:00+07:00",
            end_time="2026-06-02T12:00:00+07:00",
            tz=JAKARTA,
        )
        assert slot.start == local(2026, 6, 2, 10)
        assert slot.end == local(2026, 6, 2, 12)
        assert slot.duration_hours == 2

    def test_naive_pair_is_read_as_venue_time(self):
        slot = resolve_slot(
            start_time=datetime(2026, 6, 2, 10),
            end_time=datetime(2026, 6, 2, 11),
            tz=JAKARTA,
        )
        assert slot.start == local(2026, 6, 2, 10)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"start_time": "2026-06-02T10:00:00+07:00"},
            {"end_time": "2026-06-02T10:00:00+07:00"},
        ],
    )
    def test_only_one_bound_fails(self, kwargs):
        with pytest.raises(InvalidSlot):
            resolve_slot(tz=JAKARTA, **kwargs)

    def test_end_before_start_fails(self):
        with pytest.raises(InvalidSlot):
            resolve_slot(
                start_time=local(2026, 6, 2, 12), end_time=local(2026, 6, 2, 12), tz=JAKARTA
            )

    def test_longer_than_a_day_fails(self):
        start = local(2026, 6, 2, 8)
        with pytest.raises(InvalidSlot):
            resolve_slot(start_time=start, end_time=start + timedelta(hours=25), tz=JAKARTA)

    def test_exactly_a_day_is_allowed(self):
        start = local(2026, 6, 2, 8)
        slot = resolve_slot(start_time=start, end_time=start + timedelta(hours=24), tz=JAKARTA)
        assert slot.duration_hours == 24

    def test_garbage_string_fails(self):
        with pytest.raises(InvalidSlot):
            resolve_slot(start_time="tomorrow", end_time="later", tz=JAKARTA)


class TestResolveSlotDefaults:
    def test_no_input_means_next_full_hour_for_one_hour(self):
        # NOW is exactly 17:00 in Jakarta
        slot = resolve_slot(now=NOW, tz=JAKARTA)
        assert slot.start == local(2026, 6, 1, 17)
        assert slot.end == local(2026, 6, 1, 18)

    def test_now_mid_hour_rounds_up(self):
        slot = resolve_slot(now=NOW + timedelta(minutes=20), tz=JAKARTA)
        assert slot.start == local(2026, 6, 1, 18)

    def test_date_without_hour_starts_at_eight(self):
        slot = resolve_slot(date_str="2026-06-02", now=NOW, tz=JAKARTA)
        assert slot.start == local(2026, 6, 2, 8)
        assert slot.end == local(2026, 6, 2, 9)

    def test_date_hour_and_duration(self):
        slot = resolve_slot(
            date_str="2026-06-02", start_hour=19, duration_hours=2, now=NOW, tz=JAKARTA
        )
        assert (slot.start, slot.end) == (local(2026, 6, 2, 19), local(2026, 6, 2, 21))

    def test_last_hour_of_day_is_allowed(self):
        slot = resolve_slot(date_str="2026-06-02", start_hour=23, now=NOW, tz=JAKARTA)
        assert slot.end == local(2026, 6, 3, 0)

    def test_crossing_midnight_fails(self):
        with pytest.raises(InvalidSlot, match="day boundary"):
            resolve_slot(
                date_str="2026-06-02", start_hour=22, duration_hours=3, now=NOW, tz=JAKARTA
            )

    def test_hour_without_date_uses_today(self):
        slot = resolve_slot(start_hour=20, now=NOW, tz=JAKARTA)
        assert slot.start == local(2026, 6, 1, 20)


class TestResolveBookingSlot:
    def test_time_of_day_with_order_date(self):
        slot = resolve_booking_slot(
            start_time="14:00", order_date="2026-06-02", duration_hours=2, tz=JAKARTA
        )
        assert (slot.start, slot.end) == (local(2026, 6, 2, 14), local(2026, 6, 2, 16))

    def test_dotted_time_of_day(self):
        slot = resolve_booking_slot(start_time="14.30", order_date="2026-06-02", tz=JAKARTA)
        assert slot.start == local(2026, 6, 2, 14, 30)
        assert slot.duration_hours == 1

    def test_time_of_day_requires_order_date(self):
        with pytest.raises(InvalidSlot, match="order_date"):
            resolve_booking_slot(start_time="14:00", tz=JAKARTA)

    def test_iso_start_defaults_to_one_hour(self):
        slot = resolve_booking_slot(start_time="2026-06-02T14:00:00+07:00", tz=JAKARTA)
        assert slot.end == local(2026, 6, 2, 15)

    def test_iso_start_with_explicit_end(self):
        slot = resolve_booking_slot(
            start_time="2026-06-02T14:00:00+07:00",
            end_time="2026-06-02T17:00:00+07:00",
            tz=JAKARTA,
        )
        assert slot.duration_hours == 3

    @pytest.mark.parametrize("hours", [0, 25])
    def test_duration_out_of_range(self, hours):
        with pytest.raises(InvalidSlot):
            resolve_booking_slot(
                start_time="2026-06-02T14:00:00+07:00", duration_hours=hours, tz=JAKARTA
            )

    def test_without_start_falls_back_to_query_shape(self):
        slot = resolve_booking_slot(
            order_date="2026-06-02", start_hour=10, duration_hours=2, now=NOW, tz=JAKARTA
        )
        assert (slot.start, slot.end) == (local(2026, 6, 2, 10), local(2026, 6, 2, 12))

    def test_end_without_start_fails(self):
        with pytest.raises(InvalidSlot):
            resolve_booking_slot(end_time="2026-06-02T17:00:00+07:00", tz=JAKARTA)
