"""
Tests for LedgerService: the full path from stored entries to ledger entries.

Scenario: hourly rate 12.00, a flat 520.00 limit, and January, February and
March 2024 earning 480.00, 540.00 and 120.00.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from minijob_kernel.domain.dtos import WarningLevel
from minijob_kernel.domain.values import PeriodKey
from minijob_kernel.exceptions import MissingBillingConfigError, NoCurrentSettingError
from minijob_services import (
    BillingConfigService,
    LedgerService,
    LimitService,
    TimeEntryService,
)


@pytest.fixture
def ledger_service(session, clock, policy):
    return LedgerService(session, clock, policy)


@pytest.fixture
def entries(session, clock, policy):
    return TimeEntryService(session, clock, policy)


@pytest.fixture
def worker(session, user_id):
    BillingConfigService(session).configure(user_id, 1, 31, "12.00")
    return user_id


@pytest.fixture
def flat_limit(session):
    LimitService(session).add_limit("520.00", date(2020, 1, 1))


@pytest.fixture
def three_months(entries, worker):
    # January: 5 x 8h = 480.00
    for day in (2, 3, 4, 5, 8):
        entries.record_entry(worker, date(2024, 1, day), "09:00", "17:00")
    # February: 5 x 9h = 540.00
    for day in (1, 2, 5, 6, 7):
        entries.record_entry(worker, date(2024, 2, day), "08:00", "17:30", 30)
    # March: 2 x 5h = 120.00
    for day in (4, 5):
        entries.record_entry(worker, date(2024, 3, day), "12:00", "17:00")
    return worker


class TestLedger:
    @pytest.mark.usefixtures("flat_limit")
    def test_carry_flows_into_next_period(self, ledger_service, three_months):
        ledger = ledger_service.ledger(three_months, PeriodKey(2024, 3))

        assert [e.period.code for e in ledger] == ["2024-01", "2024-02", "2024-03"]
        assert [e.gross_earnings for e in ledger] == [
            Decimal("480.00"),
            Decimal("540.00"),
            Decimal("120.00"),
        ]
        assert [e.paid_this_period for e in ledger] == [
            Decimal("480.00"),
            Decimal("520.00"),
            Decimal("140.00"),
        ]
        assert [e.carry_out for e in ledger] == [
            Decimal("0.00"),
            Decimal("20.00"),
            Decimal("0.00"),
        ]
        assert ledger[1].exceeds_limit
        assert ledger[1].warning_level == WarningLevel.CRITICAL
        assert ledger[0].entry_count == 5
        assert ledger[1].total_hours == Decimal("45.00")

    @pytest.mark.usefixtures("flat_limit")
    def test_period_summary_folds_from_first_entry(self, ledger_service, three_months):
        march = ledger_service.period_summary(three_months, 2024, 3)
        assert march.carry_in == Decimal("20.00")
        assert march.actual_earnings == Decimal("140.00")
        assert march.paid_this_period == Decimal("140.00")

    @pytest.mark.usefixtures("flat_limit")
    def test_retroactive_edit(self, ledger_service, entries, three_months):
        change = entries.record_entry(three_months, date(2024, 1, 9), "08:00", "18:00")
        assert change.invalidated_from == PeriodKey(2024, 1)

        ledger = ledger_service.ledger(three_months, PeriodKey(2024, 3))

        assert [e.actual_earnings for e in ledger] == [
            Decimal("600.00"),
            Decimal("620.00"),
            Decimal("220.00"),
        ]
        assert [e.paid_this_period for e in ledger] == [
            Decimal("520.00"),
            Decimal("520.00"),
            Decimal("220.00"),
        ]
        assert [e.carry_out for e in ledger] == [
            Decimal("80.00"),
            Decimal("100.00"),
            Decimal("0.00"),
        ]

    @pytest.mark.usefixtures("flat_limit")
    def test_recomputation_is_idempotent(self, ledger_service, three_months):
        through = PeriodKey(2024, 6)
        assert ledger_service.ledger(three_months, through) == ledger_service.ledger(
            three_months, through
        )

    @pytest.mark.usefixtures("flat_limit")
    def test_user_without_entries(self, ledger_service, worker):
        (entry,) = ledger_service.ledger(worker, PeriodKey(2024, 4))
        assert entry.gross_earnings == Decimal("0.00")
        assert entry.warning_level == WarningLevel.SAFE
        assert entry.period.is_current

    @pytest.mark.usefixtures("flat_limit")
    def test_since_extends_start(self, ledger_service, three_months):
        ledger = ledger_service.ledger(three_months, PeriodKey(2024, 2), since=PeriodKey(2023, 11))
        assert ledger[0].period.code == "2023-11"
        assert len(ledger) == 4

    def test_policy_limits_when_table_empty(self, ledger_service, three_months):
        february = ledger_service.period_summary(three_months, 2024, 2)
        assert february.limit == Decimal("538.00")
        assert february.paid_this_period == Decimal("538.00")
        assert february.carry_out == Decimal("2.00")

    def test_missing_limit_raises(self, session, ledger_service, three_months):
        LimitService(session).add_limit("538.00", date(2024, 2, 1))
        with pytest.raises(NoCurrentSettingError):
            ledger_service.ledger(three_months, PeriodKey(2024, 3))

    def test_missing_config(self, ledger_service, user_id):
        with pytest.raises(MissingBillingConfigError):
            ledger_service.ledger(user_id, PeriodKey(2024, 1))

    @pytest.mark.usefixtures("flat_limit")
    def test_other_users_entries_are_ignored(self, session, ledger_service, entries, three_months):
        other = uuid4()
        BillingConfigService(session).configure(other, 1, 31, "12.00")
        entries.record_entry(other, date(2024, 1, 10), "08:00", "20:00")
        january = ledger_service.period_summary(three_months, 2024, 1)
        assert january.gross_earnings == Decimal("480.00")


class TestSummaries:
    @pytest.mark.usefixtures("flat_limit")
    def test_current_summary(self, ledger_service, three_months):
        current = ledger_service.current_summary(three_months)
        assert current.period.code == "2024-04"
        assert current.period.is_current
        assert current.carry_in == Decimal("0.00")

    @pytest.mark.usefixtures("flat_limit")
    def test_yearly_summary(self, ledger_service, three_months):
        year = ledger_service.yearly_summary(three_months, 2024)
        assert len(year) == 12
        assert [e.period.key.month for e in year] == list(range(1, 13))
        assert sum((e.paid_this_period for e in year), Decimal("0")) == Decimal("1140.00")
        assert [e.period.is_current for e in year].count(True) == 1

    def test_billing_periods(self, session, ledger_service, user_id):
        BillingConfigService(session).configure(user_id, 25, 24, "12.00")
        periods = ledger_service.billing_periods(user_id, count=3, forward=1)

        assert [p.code for p in periods] == ["2024-05", "2024-04", "2024-03", "2024-02"]
        april = periods[1]
        assert april.is_current
        assert (april.start_date, april.end_date) == (date(2024, 3, 25), date(2024, 4, 24))
        assert april.label == "April 2024 (25.03.2024 - 24.04.2024)"

    def test_billing_periods_default_window(self, session, ledger_service, user_id):
        BillingConfigService(session).configure(user_id, 1, 31, "12.00")
        periods = ledger_service.billing_periods(user_id)

        assert len(periods) == 15
        assert (periods[0].code, periods[-1].code) == ("2024-07", "2023-05")
        assert [p.code for p in periods if p.is_current] == ["2024-04"]
