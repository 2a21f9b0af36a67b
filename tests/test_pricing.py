from __future__ import annotations

from datetime import UTC, datetime

import pytest

from futsal.errors import BadRequest, NoPriceConfigured
from futsal.models import DayType
from futsal.pricing import (
    calculate_price,
    day_type_of,
    ensure_no_overlap_in_payload,
    price_per_hour_for_slot,
    tiers_overlap,
    validate_price_range,
)

from .factories import JAKARTA, local, weekday, weekend

# 2026-06-01 is a Monday, 2026-05-30 a Saturday, 2026-05-31 a Sunday
DAY_TIERS = [weekday(8, 17, 50000), weekday(17, 23, 80000)]


class TestDayType:
    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (1, DayType.WEEKDAY),  # Monday
            (5, DayType.WEEKDAY),  # Friday
            (6, DayType.WEEKEND),  # Saturday
            (7, DayType.WEEKEND),  # Sunday
        ],
    )
    def test_weekend_is_saturday_and_sunday(self, day, expected):
        assert day_type_of(local(2026, 6, day, 12)) == expected


class TestCalculatePrice:
    def test_inside_one_tier(self):
        price = calculate_price(
            DAY_TIERS, local(2026, 6, 1, 9), local(2026, 6, 1, 11), JAKARTA
        )
        assert price == 50000 * 2

    def test_crossing_tier_edge(self):
        price = calculate_price(
            DAY_TIERS, local(2026, 6, 1, 16), local(2026, 6, 1, 18), JAKARTA
        )
        assert price == 130000

    def test_utc_input_is_priced_in_venue_time(self):
        # 09:00-11:00 UTC is 16:00-18:00 in Jakarta
        price = calculate_price(
            DAY_TIERS,
            datetime(2026, 6, 1, 9, tzinfo=UTC),
            datetime(2026, 6, 1, 11, tzinfo=UTC),
            JAKARTA,
        )
        assert price == 130000

    def test_partial_hours_are_prorated(self):
        price = calculate_price(
            DAY_TIERS, local(2026, 6, 1, 16, 30), local(2026, 6, 1, 17, 30), JAKARTA
        )
        assert price == 25000 + 40000

    def test_total_rounds_half_up(self):
        price = calculate_price(
            [weekday(0, 24, 33333)], local(2026, 6, 1, 10), local(2026, 6, 1, 10, 30), JAKARTA
        )
        assert price == 16667

    def test_saturday_night_into_sunday(self):
        tiers = [weekend(22, 24, 90000), weekend(0, 2, 70000)]
        price = calculate_price(tiers, local(2026, 5, 30, 23), local(2026, 5, 31, 1), JAKARTA)
        assert price == 90000 + 70000

    def test_sunday_night_into_monday(self):
        tiers = [weekend(0, 24, 100000), weekday(0, 24, 60000)]
        price = calculate_price(tiers, local(2026, 5, 31, 23), local(2026, 6, 1, 1), JAKARTA)
        assert price == 100000 + 60000

    def test_uncovered_hour_names_day_type_and_hour(self):
        with pytest.raises(NoPriceConfigured, match="WEEKDAY at 07:00"):
            calculate_price(DAY_TIERS, local(2026, 6, 1, 7), local(2026, 6, 1, 9), JAKARTA)

    def test_weekend_without_weekend_tiers(self):
        with pytest.raises(NoPriceConfigured):
            calculate_price(DAY_TIERS, local(2026, 5, 30, 9), local(2026, 5, 30, 10), JAKARTA)

    def test_no_tiers_at_all(self):
        with pytest.raises(NoPriceConfigured):
            calculate_price([], local(2026, 6, 1, 9), local(2026, 6, 1, 10), JAKARTA)

    def test_empty_interval(self):
        with pytest.raises(BadRequest):
            calculate_price(DAY_TIERS, local(2026, 6, 1, 9), local(2026, 6, 1, 9), JAKARTA)


class TestPricePerHourForSlot:
    def test_matching_tier(self):
        assert price_per_hour_for_slot(DAY_TIERS, local(2026, 6, 1, 18), JAKARTA) == 80000

    def test_end_hour_is_exclusive(self):
        assert price_per_hour_for_slot(DAY_TIERS, local(2026, 6, 1, 17), JAKARTA) == 80000

    def test_no_match_is_none(self):
        assert price_per_hour_for_slot(DAY_TIERS, local(2026, 6, 1, 23), JAKARTA) is None


class TestTierValidation:
    def test_overlap_same_day_type(self):
        assert tiers_overlap(weekday(8, 17, 1), weekday(16, 20, 1))

    def test_adjacent_is_not_overlap(self):
        assert not tiers_overlap(weekday(8, 17, 1), weekday(17, 20, 1))

    def test_other_day_type_is_not_overlap(self):
        assert not tiers_overlap(weekday(8, 17, 1), weekend(8, 17, 1))

    def test_payload_with_overlap_is_rejected(self):
        with pytest.raises(BadRequest, match="Overlapping"):
            ensure_no_overlap_in_payload([weekday(8, 17, 1), weekday(10, 12, 1)])

    def test_valid_payload_passes(self):
        ensure_no_overlap_in_payload(DAY_TIERS + [weekend(8, 23, 90000)])

    @pytest.mark.parametrize(
        ("start", "end", "price"),
        [(10, 10, 1), (12, 10, 1), (8, 17, -1), (24, 24, 1), (0, 25, 1)],
    )
    def test_invalid_range(self, start, end, price):
        with pytest.raises(BadRequest):
            validate_price_range(start, end, price)
