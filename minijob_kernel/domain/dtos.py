"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the closed, immutable records that flow through the earnings
    pipeline: configuration inputs (BillingPeriodConfig, UserBillingConfig,
    MinijobLimit), raw work (TimeEntry), and derived results (BillingPeriod,
    PeriodEarnings, LedgerEntry).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  Selectors convert ORM rows into these types
    at the persistence boundary; engines only ever see these types.

Invariants enforced:
    - BillingPeriodConfig days are in 1..31.
    - UserBillingConfig hourly rate is a positive Decimal in whole cents.
    - TimeEntry end differs from start, break is 0..480 minutes and worked
      minutes after the break are at least 15.  Violations are rejected at
      construction, so an invalid entry never reaches aggregation.
    - MinijobLimit amount is positive whole cents and its range is not
      inverted.  Amounts finer than a cent are refused rather than rounded,
      because the database stores two decimal places.

Failure modes:
    - ValidationError subclasses for malformed time entries.
    - ConfigError subclasses for invalid configuration records.

Data flow:
    TimeEntry + BillingPeriod -> PeriodEarnings -> LedgerEntry
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from minijob_kernel.domain.values import (
    PeriodKey,
    compute_span_minutes,
    compute_worked_minutes,
    is_whole_cents,
    parse_date,
    parse_time,
    round_money,
    to_decimal,
)
from minijob_kernel.exceptions import (
    BelowMinimumDurationError,
    BreakOutOfRangeError,
    ConfigError,
    InvalidBillingConfigError,
    InvalidHourlyRateError,
    InvalidTimeRangeError,
    MalformedInputError,
)

MINIMUM_WORK_MINUTES = 15
MAXIMUM_BREAK_MINUTES = 480


# ---------------------------------------------------------------------------
# Configuration inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BillingPeriodConfig:
    """
    A user's recurring billing period definition.

    Contract:
        ``start_day`` and ``end_day`` are days of month in 1..31.  When
        ``start_day > end_day`` every period spans a calendar-month boundary.
        Days beyond a month's length are clamped by the resolver.

    Guarantees:
        - Immutable once constructed.
    """

    start_day: int = 1
    end_day: int = 31

    def __post_init__(self) -> None:
        for name in ("start_day", "end_day"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidBillingConfigError(
                    self.start_day, self.end_day, f"{name} must be an integer"
                )
            if not 1 <= value <= 31:
                raise InvalidBillingConfigError(
                    self.start_day, self.end_day, f"{name} must be between 1 and 31"
                )

    @property
    def wraps_month(self) -> bool:
        return self.start_day > self.end_day

    @property
    def is_calendar_month(self) -> bool:
        return self.start_day == 1 and self.end_day == 31

    @property
    def is_contiguous(self) -> bool:
        """True when consecutive periods leave no uncovered days between them."""
        return self.is_calendar_month or self.start_day == self.end_day + 1

    @property
    def description(self) -> str:
        if self.wraps_month:
            return f"day {self.start_day} to day {self.end_day} of the following month"
        return f"day {self.start_day} to day {self.end_day} of the month"


@dataclass(frozen=True, slots=True)
class UserBillingConfig:
    """Billing configuration of one user: period days and hourly rate."""

    user_id: UUID | str | None
    period_config: BillingPeriodConfig
    hourly_rate: Decimal

    def __post_init__(self) -> None:
        rate = to_decimal(self.hourly_rate)
        if rate <= 0:
            raise InvalidHourlyRateError(self.hourly_rate)
        if not is_whole_cents(rate):
            raise InvalidHourlyRateError(self.hourly_rate, "must be whole cents")
        object.__setattr__(self, "hourly_rate", rate)


@dataclass(frozen=True, slots=True)
class MinijobLimit:
    """
    The statutory monthly earnings cap in force over a date range.

    ``effective_until`` of None means open-ended.  Both bounds are inclusive.
    """

    amount: Decimal
    effective_from: date
    effective_until: date | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount)
        if amount <= 0:
            raise ConfigError(f"Minijob limit must be positive, got {self.amount}")
        if not is_whole_cents(amount):
            raise ConfigError(f"Minijob limit must be whole cents, got {self.amount}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(
            self, "effective_from", parse_date(self.effective_from, "effective_from")
        )
        if self.effective_until is not None:
            until = parse_date(self.effective_until, "effective_until")
            if until < self.effective_from:
                raise ConfigError(
                    f"Minijob limit ends ({until}) before it starts "
                    f"({self.effective_from})"
                )
            object.__setattr__(self, "effective_until", until)

    def is_effective_on(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        return self.effective_until is None or day <= self.effective_until

    def overlaps(self, other: MinijobLimit) -> bool:
        """Two inclusive ranges overlap if start1 <= end2 and start2 <= end1."""
        end_self = self.effective_until or date.max
        end_other = other.effective_until or date.max
        return self.effective_from <= end_other and other.effective_from <= end_self


# ---------------------------------------------------------------------------
# Raw work
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TimeEntry:
    """
    One worked shift.

    Contract:
        Constructed only from validated values.  Strings for date and times
        are parsed on construction; anything malformed is rejected.

    Guarantees:
        - ``worked_minutes >= MINIMUM_WORK_MINUTES``.
        - ``0 <= break_minutes <= MAXIMUM_BREAK_MINUTES``.
        - A shift ending before it starts wraps past midnight exactly once.
    """

    entry_date: date
    start_time: time
    end_time: time
    break_minutes: int = 0
    description: str | None = None
    entry_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entry_date", parse_date(self.entry_date, "date"))
        object.__setattr__(self, "start_time", parse_time(self.start_time, "start_time"))
        object.__setattr__(self, "end_time", parse_time(self.end_time, "end_time"))

        if isinstance(self.break_minutes, bool) or not isinstance(self.break_minutes, int):
            raise MalformedInputError("break_minutes", self.break_minutes, "whole minutes")
        if not 0 <= self.break_minutes <= MAXIMUM_BREAK_MINUTES:
            raise BreakOutOfRangeError(self.break_minutes, MAXIMUM_BREAK_MINUTES)

        if compute_span_minutes(self.start_time, self.end_time) == 0:
            raise InvalidTimeRangeError(
                self.start_time.strftime("%H:%M"), self.end_time.strftime("%H:%M")
            )

        worked = compute_worked_minutes(self.start_time, self.end_time, self.break_minutes)
        if worked < MINIMUM_WORK_MINUTES:
            raise BelowMinimumDurationError(worked, MINIMUM_WORK_MINUTES)

    @classmethod
    def from_raw(
        cls,
        entry_date: str | date,
        start_time: str | time,
        end_time: str | time,
        break_minutes: int | str = 0,
        description: str | None = None,
        entry_id: UUID | None = None,
    ) -> TimeEntry:
        """Build an entry from boundary strings (``YYYY-MM-DD``, ``HH:MM``)."""
        if isinstance(break_minutes, str):
            try:
                break_minutes = int(break_minutes.strip())
            except ValueError as e:
                raise MalformedInputError("break_minutes", break_minutes, "whole minutes") from e
        return cls(
            entry_date=entry_date,
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            description=description,
            entry_id=entry_id,
        )

    @property
    def worked_minutes(self) -> int:
        return compute_worked_minutes(self.start_time, self.end_time, self.break_minutes)

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BillingPeriod:
    """
    One concrete, resolved billing period.  Both bounds are inclusive.
    """

    key: PeriodKey
    label: str
    start_date: date
    end_date: date
    is_current: bool = False

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(
                f"start_date ({self.start_date}) cannot be after end_date ({self.end_date})"
            )

    @property
    def code(self) -> str:
        return self.key.code

    @property
    def day_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, other: BillingPeriod) -> bool:
        return self.start_date <= other.end_date and other.start_date <= self.end_date

    def is_followed_by(self, other: BillingPeriod) -> bool:
        """True when ``other`` starts the day after this period ends."""
        return other.start_date == self.end_date + timedelta(days=1)


@dataclass(frozen=True, slots=True)
class PeriodEarnings:
    """Aggregated gross result of one billing period."""

    period: BillingPeriod
    entry_count: int
    total_minutes: int
    total_hours: Decimal
    gross_earnings: Decimal
    hourly_rate: Decimal

    @property
    def average_hours_per_day(self) -> Decimal:
        """Average hours per recorded entry, 0 when there are none."""
        if self.entry_count == 0:
            return Decimal("0.00")
        return round_money(self.total_hours / Decimal(self.entry_count))


class WarningLevel(str, Enum):
    """Risk level of a period's earnings relative to its limit."""

    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    The authoritative financial result for one period.

    Contract:
        ``actual_earnings = gross_earnings + carry_in``;
        ``paid_this_period = min(actual_earnings, limit)``;
        ``carry_out = max(0, actual_earnings - limit)``.
        ``carry_in`` equals the previous entry's ``carry_out`` in a ledger.
    """

    period: BillingPeriod
    gross_earnings: Decimal
    carry_in: Decimal
    actual_earnings: Decimal
    paid_this_period: Decimal
    carry_out: Decimal
    exceeds_limit: bool
    warning_level: WarningLevel
    limit: Decimal
    hourly_rate: Decimal
    entry_count: int
    total_minutes: int
    total_hours: Decimal

    @property
    def remaining_earnings(self) -> Decimal:
        """Amount still earnable this period before the limit is reached."""
        return max(Decimal("0.00"), round_money(self.limit - self.actual_earnings))

    @property
    def remaining_hours(self) -> Decimal:
        """Hours still workable this period at the current rate."""
        return round_money(self.remaining_earnings / self.hourly_rate)

    def to_dict(self) -> dict[str, Any]:
        """Flat mapping for presentation layers; amounts as strings."""
        return {
            "period": self.period.code,
            "label": self.period.label,
            "start_date": self.period.start_date.isoformat(),
            "end_date": self.period.end_date.isoformat(),
            "is_current": self.period.is_current,
            "gross_earnings": str(self.gross_earnings),
            "carry_in": str(self.carry_in),
            "actual_earnings": str(self.actual_earnings),
            "paid_this_period": str(self.paid_this_period),
            "carry_out": str(self.carry_out),
            "exceeds_limit": self.exceeds_limit,
            "warning_level": self.warning_level.value,
            "limit": str(self.limit),
            "hourly_rate": str(self.hourly_rate),
            "entry_count": self.entry_count,
            "total_hours": str(self.total_hours),
            "remaining_earnings": str(self.remaining_earnings),
            "remaining_hours": str(self.remaining_hours),
        }
