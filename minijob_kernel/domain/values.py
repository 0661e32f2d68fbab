"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value types and conversions for all earnings
    computations: Decimal coercion (never float), half-up cent rounding,
    minute/hour conversion, date and time-of-day parsing, and ``PeriodKey``,
    the ordinal key of a billing period.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module and by all engines.

Invariants enforced:
    - Monetary amounts are Decimal, never float.  ``to_decimal`` refuses
      floats outright.
    - Rounding to the currency minor unit uses ROUND_HALF_UP and happens only
      where a caller explicitly asks for it (``round_money``).
    - A shift wraps past midnight at most once: a negative raw difference
      gets exactly 1440 minutes added.

Failure modes:
    - ValueError when a float reaches ``to_decimal``.
    - MalformedInputError on unparseable date/time strings or numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from minijob_kernel.exceptions import MalformedInputError

MONEY_DECIMAL_PLACES = 2
HOURS_DECIMAL_PLACES = 2
MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Coerce an amount to Decimal.

    Raises:
        ValueError: if ``value`` is a float (floats are never money).
        MalformedInputError: if ``value`` is not a valid number.
    """
    if isinstance(value, float):
        raise ValueError(f"Float amounts are not allowed, got {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise MalformedInputError("amount", value, "a decimal number") from e
    if not result.is_finite():
        raise MalformedInputError("amount", value, "a finite decimal number")
    return result


def _quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def round_money(value: Decimal) -> Decimal:
    """Round to the currency minor unit (2 places), half-up."""
    return _quantize(value, MONEY_DECIMAL_PLACES)


def is_whole_cents(value: Decimal) -> bool:
    """True when ``value`` has no digits below the currency minor unit."""
    return value == value.quantize(Decimal(1).scaleb(-MONEY_DECIMAL_PLACES))


def minutes_to_hours(minutes: int) -> Decimal:
    """Convert whole minutes to hours rounded to 2 places, half-up."""
    return _quantize(Decimal(minutes) / Decimal(60), HOURS_DECIMAL_PLACES)


def parse_date(value: date | str, field: str = "date") -> date:
    """Parse an ISO ``YYYY-MM-DD`` date, rejecting impossible days like 31 February."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_PATTERN.match(value.strip()):
        raise MalformedInputError(field, value, "YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise MalformedInputError(field, value, "a real calendar date") from e


def parse_time(value: time | str, field: str = "time") -> time:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` time of day."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise MalformedInputError(field, value, "HH:MM")
    match = _TIME_PATTERN.match(value.strip())
    if match is None:
        raise MalformedInputError(field, value, "HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def compute_span_minutes(start: time, end: time) -> int:
    """
    Minutes from ``start`` to ``end`` on a 24-hour clock.

    If ``end`` is numerically before ``start`` the shift crossed midnight
    and one day is added.  This is the only wrap tolerated.
    """
    span = minute_of_day(end) - minute_of_day(start)
    if span < 0:
        span += MINUTES_PER_DAY
    return span


def compute_worked_minutes(start: time, end: time, break_minutes: int) -> int:
    """Worked minutes of a shift: ``(end - start) - break``."""
    return compute_span_minutes(start, end) - break_minutes


@dataclass(frozen=True, slots=True, order=True)
class PeriodKey:
    """
    Ordinal key of a billing period: the (year, month) it is named after.

    Guarantees:
        - Immutable, hashable and totally ordered chronologically.
        - ``month`` is always in 1..12.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise MalformedInputError("month", self.month, "1..12")
        if not 1 <= self.year <= 9999:
            raise MalformedInputError("year", self.year, "1..9999")

    @classmethod
    def of(cls, day: date) -> PeriodKey:
        """Key of the calendar month containing ``day``."""
        return cls(day.year, day.month)

    @classmethod
    def parse(cls, code: str) -> PeriodKey:
        """Parse a ``YYYY-MM`` code."""
        match = re.match(r"^(\d{4})-(\d{2})$", code.strip()) if isinstance(code, str) else None
        if match is None:
            raise MalformedInputError("period", code, "YYYY-MM")
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def code(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def ordinal(self) -> int:
        """Months since year 0; consecutive keys differ by exactly 1."""
        return self.year * 12 + (self.month - 1)

    def shift(self, months: int) -> PeriodKey:
        ordinal = self.ordinal + months
        return PeriodKey(ordinal // 12, ordinal % 12 + 1)

    def next(self) -> PeriodKey:
        return self.shift(1)

    def previous(self) -> PeriodKey:
        return self.shift(-1)

    def __str__(self) -> str:
        return self.code
