"""Tests for the time entry aggregator."""

from datetime import date
from decimal import Decimal

import pytest

from minijob_engines.aggregation import (
    TimeEntryAggregator,
    earnings_for_minutes,
    entries_in_period,
)
from minijob_engines.periods import resolve_period
from minijob_kernel.exceptions import InvalidHourlyRateError


@pytest.fixture
def aggregator() -> TimeEntryAggregator:
    return TimeEntryAggregator()


class TestAggregate:
    def test_sums_entries_inside_period(self, aggregator, wrapping_config, make_entry):
        period = resolve_period(wrapping_config, 2024, 4)
        entries = [
            make_entry("2024-03-24", "09:00", "17:00"),  # previous period
            make_entry("2024-03-25", "09:00", "17:00"),  # first day
            make_entry("2024-04-24", "10:00", "14:30", 30),  # last day
            make_entry("2024-04-25", "09:00", "17:00"),  # next period
        ]
        result = aggregator.aggregate(entries, period, Decimal("12.00"))
        assert result.entry_count == 2
        assert result.total_minutes == 480 + 240
        assert result.total_hours == Decimal("12.00")
        assert result.gross_earnings == Decimal("144.00")
        assert result.period == period

    def test_overnight_entry(self, aggregator, calendar_config, make_entry):
        period = resolve_period(calendar_config, 2024, 4)
        result = aggregator.aggregate(
            [make_entry("2024-04-05", "23:00", "01:00")], period, "12.00"
        )
        assert result.total_minutes == 120
        assert result.gross_earnings == Decimal("24.00")

    def test_overnight_entry_counts_in_period_of_its_start_date(
        self, aggregator, calendar_config, make_entry
    ):
        april = resolve_period(calendar_config, 2024, 4)
        may = resolve_period(calendar_config, 2024, 5)
        entries = [make_entry("2024-04-30", "22:00", "02:00")]
        assert aggregator.aggregate(entries, april, "12").total_minutes == 240
        assert aggregator.aggregate(entries, may, "12").entry_count == 0

    def test_empty_period(self, aggregator, calendar_config):
        result = aggregator.aggregate([], resolve_period(calendar_config, 2024, 4), "12.00")
        assert result.entry_count == 0
        assert result.total_minutes == 0
        assert result.gross_earnings == Decimal("0.00")

    def test_rounds_once_after_summing(self, aggregator, calendar_config, make_entry):
        # Three 25-minute entries at 12.34/h: per-entry rounding gives 3 x 5.14 = 15.42,
        # rounding the total once gives 75 min -> 15.425 -> 15.43.
        period = resolve_period(calendar_config, 2024, 4)
        entries = [
            make_entry("2024-04-01", "09:00", "09:25"),
            make_entry("2024-04-02", "09:00", "09:25"),
            make_entry("2024-04-03", "09:00", "09:25"),
        ]
        result = aggregator.aggregate(entries, period, Decimal("12.34"))
        assert result.total_minutes == 75
        assert result.gross_earnings == Decimal("15.43")

    def test_scenario_hours(self, aggregator, calendar_config, make_entry):
        period = resolve_period(calendar_config, 2024, 1)
        entries = [make_entry(date(2024, 1, day), "08:00", "16:00") for day in range(1, 6)]
        result = aggregator.aggregate(entries, period, Decimal("12"))
        assert result.total_hours == Decimal("40.00")
        assert result.gross_earnings == Decimal("480.00")

    def test_float_rate_refused(self, aggregator, calendar_config):
        with pytest.raises(ValueError):
            aggregator.aggregate([], resolve_period(calendar_config, 2024, 4), 12.0)

    @pytest.mark.parametrize("rate", ["0", "-12.00"])
    def test_non_positive_rate(self, aggregator, calendar_config, rate):
        with pytest.raises(InvalidHourlyRateError):
            aggregator.aggregate([], resolve_period(calendar_config, 2024, 4), rate)

    def test_aggregate_many(self, aggregator, calendar_config, make_entry):
        periods = [resolve_period(calendar_config, 2024, m) for m in (1, 2, 3)]
        entries = [make_entry("2024-02-10"), make_entry("2024-03-10"), make_entry("2024-03-11")]
        results = aggregator.aggregate_many(entries, periods, "10.00")
        assert [r.entry_count for r in results] == [0, 1, 2]
        assert [r.gross_earnings for r in results] == [
            Decimal("0.00"),
            Decimal("80.00"),
            Decimal("160.00"),
        ]


class TestHelpers:
    def test_entries_in_period_sorted(self, calendar_config, make_entry):
        period = resolve_period(calendar_config, 2024, 4)
        late = make_entry("2024-04-20", "18:00", "20:00")
        early = make_entry("2024-04-20", "08:00", "10:00")
        first = make_entry("2024-04-01")
        assert entries_in_period([late, early, first], period) == (first, early, late)

    def test_earnings_for_minutes_half_up(self):
        assert earnings_for_minutes(1, Decimal("0.30")) == Decimal("0.01")
        assert earnings_for_minutes(90, Decimal("12.00")) == Decimal("18.00")
