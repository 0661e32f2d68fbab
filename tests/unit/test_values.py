"""Tests for minijob_kernel.domain.values: money, time arithmetic, PeriodKey."""

from datetime import date, time
from decimal import Decimal

import pytest

from minijob_kernel.domain.values import (
    PeriodKey,
    compute_span_minutes,
    compute_worked_minutes,
    is_whole_cents,
    minutes_to_hours,
    parse_date,
    parse_time,
    round_money,
    to_decimal,
)
from minijob_kernel.exceptions import MalformedInputError


class TestToDecimal:
    def test_accepts_decimal_int_and_str(self):
        assert to_decimal(Decimal("12.50")) == Decimal("12.50")
        assert to_decimal(12) == Decimal("12")
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    def test_refuses_float(self):
        with pytest.raises(ValueError, match="Float"):
            to_decimal(12.5)

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity"])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(MalformedInputError):
            to_decimal(value)


class TestRounding:
    def test_round_money_half_up(self):
        assert round_money(Decimal("0.005")) == Decimal("0.01")
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")

    def test_minutes_to_hours(self):
        assert minutes_to_hours(2400) == Decimal("40.00")
        assert minutes_to_hours(50) == Decimal("0.83")
        assert minutes_to_hours(1) == Decimal("0.02")

    def test_is_whole_cents(self):
        assert is_whole_cents(Decimal("12"))
        assert is_whole_cents(Decimal("12.50"))
        assert is_whole_cents(Decimal("12.500"))
        assert not is_whole_cents(Decimal("12.345"))


class TestParsing:
    def test_parse_date(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)
        assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024-13-01", "01.04.2024", "2024-4-1", 20240401])
    def test_parse_date_rejects(self, value):
        with pytest.raises(MalformedInputError) as exc:
            parse_date(value, "work_date")
        assert exc.value.field == "work_date"

    def test_parse_time(self):
        assert parse_time("09:05") == time(9, 5)
        assert parse_time("23:59:30") == time(23, 59)
        assert parse_time("7:30") == time(7, 30)

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "", None])
    def test_parse_time_rejects(self, value):
        with pytest.raises(MalformedInputError):
            parse_time(value)


class TestShiftArithmetic:
    def test_same_day_span(self):
        assert compute_span_minutes(time(9, 0), time(17, 30)) == 510

    def test_overnight_wraps_once(self):
        assert compute_span_minutes(time(23, 0), time(1, 0)) == 120

    def test_identical_times_span_zero(self):
        assert compute_span_minutes(time(8, 0), time(8, 0)) == 0

    def test_worked_minutes_subtracts_break(self):
        assert compute_worked_minutes(time(9, 0), time(17, 0), 30) == 450


class TestPeriodKey:
    def test_ordering_and_code(self):
        assert PeriodKey(2023, 12) < PeriodKey(2024, 1)
        assert PeriodKey(2024, 4).code == "2024-04"
        assert str(PeriodKey(2024, 11)) == "2024-11"

    def test_next_and_previous_cross_years(self):
        assert PeriodKey(2023, 12).next() == PeriodKey(2024, 1)
        assert PeriodKey(2024, 1).previous() == PeriodKey(2023, 12)
        assert PeriodKey(2024, 5).shift(-17) == PeriodKey(2022, 12)

    def test_ordinal_is_consecutive(self):
        assert PeriodKey(2024, 1).ordinal - PeriodKey(2023, 12).ordinal == 1

    def test_parse(self):
        assert PeriodKey.parse("2024-04") == PeriodKey(2024, 4)
        with pytest.raises(MalformedInputError):
            PeriodKey.parse("2024/04")

    def test_of_date(self):
        assert PeriodKey.of(date(2024, 2, 29)) == PeriodKey(2024, 2)

    def test_invalid_month(self):
        with pytest.raises(MalformedInputError):
            PeriodKey(2024, 13)

    def test_hashable(self):
        assert len({PeriodKey(2024, 1), PeriodKey(2024, 1), PeriodKey(2024, 2)}) == 2
