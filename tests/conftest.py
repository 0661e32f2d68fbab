"""
Pytest fixtures for the minijob ledger test suite.

Provides:
- In-memory SQLite database sessions (one fresh database per test)
- Deterministic clock, default policy and billing configuration fixtures
- Builders for time entries, periods and period earnings
- Structured log capture
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from minijob_config import get_active_policy
from minijob_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from minijob_kernel.domain.clock import DeterministicClock
from minijob_kernel.domain.dtos import (
    BillingPeriodConfig,
    MinijobLimit,
    PeriodEarnings,
    TimeEntry,
)
from minijob_kernel.domain.values import PeriodKey, minutes_to_hours
from minijob_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from minijob_engines.limits import LimitSchedule
from minijob_engines.periods import resolve_period

TEST_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture minijob_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "ledger_built" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("minijob_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """A fresh in-memory SQLite database with all tables created."""
    eng = init_engine_from_url(TEST_DATABASE_URL)
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Session on the per-test database; rolled back at teardown."""
    sess = get_session()
    yield sess
    try:
        sess.rollback()
    finally:
        sess.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    """Clock fixed at noon UTC on 10 April 2024."""
    return DeterministicClock.on(date(2024, 4, 10))


@pytest.fixture
def policy():
    return get_active_policy()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def calendar_config() -> BillingPeriodConfig:
    return BillingPeriodConfig(1, 31)


@pytest.fixture
def wrapping_config() -> BillingPeriodConfig:
    return BillingPeriodConfig(25, 24)


@pytest.fixture
def flat_limit_520() -> LimitSchedule:
    """A single open-ended 520.00 limit."""
    return LimitSchedule([MinijobLimit(Decimal("520.00"), date(2020, 1, 1))])


@pytest.fixture
def make_entry():
    """Factory for validated time entries from boundary strings."""

    def _make(
        day: date | str,
        start: str = "09:00",
        end: str = "17:00",
        break_minutes: int = 0,
        description: str | None = None,
    ) -> TimeEntry:
        return TimeEntry.from_raw(day, start, end, break_minutes, description)

    return _make


def _earnings_for(
    key: PeriodKey,
    gross: Decimal | str,
    config: BillingPeriodConfig,
    rate: Decimal,
) -> PeriodEarnings:
    period = resolve_period(config, key.year, key.month)
    gross = Decimal(gross)
    minutes = int(gross * 60 / rate)
    return PeriodEarnings(
        period=period,
        entry_count=1 if gross else 0,
        total_minutes=minutes,
        total_hours=minutes_to_hours(minutes),
        gross_earnings=gross,
        hourly_rate=rate,
    )


@pytest.fixture
def earnings_chain():
    """
    Factory for consecutive PeriodEarnings with given gross amounts.

    Usage::

        chain = earnings_chain(PeriodKey(2024, 1), ["480.00", "540.00"])
    """

    def _chain(
        first: PeriodKey,
        grosses: list[Decimal | str],
        config: BillingPeriodConfig | None = None,
        rate: Decimal | str = "12.00",
    ) -> list[PeriodEarnings]:
        config = config or BillingPeriodConfig(1, 31)
        return [
            _earnings_for(first.shift(offset), gross, config, Decimal(rate))
            for offset, gross in enumerate(grosses)
        ]

    return _chain
