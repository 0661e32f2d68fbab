"""
minijob_engines.periods -- Billing period resolution for user-defined period days.

Responsibility:
    Turn a per-user ``BillingPeriodConfig`` (start day, end day) plus a
    reference point into concrete, inclusive ``BillingPeriod`` date ranges,
    and enumerate sequences of periods for selection lists and for the
    carryover fold.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import minijob_kernel/domain and minijob_kernel/exceptions.
    Consumed by the aggregation engine (period boundaries) and by
    minijob_services.ledger_service.

Invariants enforced:
    - Periods are keyed by ``PeriodKey(year, month)``.  A non-wrapping
      config keyed by M runs from ``start_day`` of M to ``end_day`` of M.
      A wrapping config (``start_day > end_day``) keyed by M runs from
      ``start_day`` of M-1 to ``end_day`` of M, so 25/24 keyed April covers
      25 March through 24 April.
    - Days beyond a month's length are clamped to its last day, each month
      independently.
    - Resolved periods never overlap: a clamped start falling on or before
      the previous period's end moves to the day after that end.
    - Purity: "today" is a parameter; the resolver never reads the clock.

Failure modes:
    - MissingBillingConfigError when the config is None.
    - InvalidBillingConfigError (from BillingPeriodConfig) for days outside 1..31.
    - ValueError for non-positive counts or an inverted key range.

Usage:
    from minijob_engines.periods import BillingPeriodResolver
    from minijob_kernel.domain.dtos import BillingPeriodConfig

    resolver = BillingPeriodResolver(BillingPeriodConfig(25, 24))
    period = resolver.resolve(2024, 4, today=date(2024, 4, 2))
    print(period.label)  # April 2024 (25.03.2024 - 24.04.2024)
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from minijob_kernel.domain.dtos import BillingPeriod, BillingPeriodConfig
from minijob_kernel.domain.values import PeriodKey
from minijob_kernel.exceptions import MissingBillingConfigError
from minijob_kernel.logging_config import get_logger
from minijob_engines.tracer import traced_engine

logger = get_logger("engines.periods")

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Days that do not exist in every month and therefore get clamped.
_CLAMPED_DAYS = frozenset({29, 30, 31})


def _require_config(config: BillingPeriodConfig | None) -> BillingPeriodConfig:
    if config is None:
        raise MissingBillingConfigError(None)
    return config


def days_in_month(key: PeriodKey) -> int:
    return calendar.monthrange(key.year, key.month)[1]


def clamp_day(key: PeriodKey, day: int) -> date:
    """The ``day`` of month ``key``, clamped to the month's last day."""
    return date(key.year, key.month, min(day, days_in_month(key)))


def _period_end(config: BillingPeriodConfig, key: PeriodKey) -> date:
    return clamp_day(key, config.end_day)


def _period_start(config: BillingPeriodConfig, key: PeriodKey) -> date:
    if not config.wraps_month:
        return clamp_day(key, config.start_day)
    start = clamp_day(key.previous(), config.start_day)
    previous_end = _period_end(config, key.previous())
    if start <= previous_end:
        start = previous_end + timedelta(days=1)
    return start


def format_label(key: PeriodKey, start: date, end: date) -> str:
    """Human label naming the key month and the concrete dates."""
    return (
        f"{MONTH_NAMES[key.month - 1]} {key.year} "
        f"({start:%d.%m.%Y} - {end:%d.%m.%Y})"
    )


def _build(config: BillingPeriodConfig, key: PeriodKey, today: date | None) -> BillingPeriod:
    start = _period_start(config, key)
    end = _period_end(config, key)
    return BillingPeriod(
        key=key,
        label=format_label(key, start, end),
        start_date=start,
        end_date=end,
        is_current=today is not None and start <= today <= end,
    )


def resolve_period(
    config: BillingPeriodConfig | None,
    year: int,
    month: int,
    today: date | None = None,
) -> BillingPeriod:
    """
    Resolve the concrete period keyed by (``year``, ``month``).

    Preconditions:
        ``config`` is present; ``month`` is 1..12.

    Postconditions:
        ``start_date <= end_date``; ``is_current`` is True only when
        ``today`` is given and falls inside the inclusive range.

    Raises:
        MissingBillingConfigError: if ``config`` is None.
        MalformedInputError: if year or month are out of range.
    """
    config = _require_config(config)
    return _build(config, PeriodKey(year, month), today)


def period_key_for_date(config: BillingPeriodConfig | None, day: date) -> PeriodKey:
    """
    Key of the period that would contain ``day``.

    For a wrapping config, a day after the end of its own month's period
    belongs to the next month's key.  With a non-contiguous config the
    returned period may still not contain ``day``; see ``period_containing``.
    """
    config = _require_config(config)
    key = PeriodKey.of(day)
    if config.wraps_month and day > _period_end(config, key):
        return key.next()
    return key


def period_containing(
    config: BillingPeriodConfig | None,
    day: date,
    today: date | None = None,
) -> BillingPeriod | None:
    """The period containing ``day``, or None when ``day`` falls in a gap."""
    config = _require_config(config)
    period = _build(config, period_key_for_date(config, day), today)
    if period.contains(day):
        return period
    return None


def periods_between(
    config: BillingPeriodConfig | None,
    first: PeriodKey,
    last: PeriodKey,
    today: date | None = None,
) -> tuple[BillingPeriod, ...]:
    """All periods from ``first`` through ``last`` inclusive, oldest first."""
    config = _require_config(config)
    if last < first:
        raise ValueError(f"Period range is inverted: {first} after {last}")
    return tuple(
        _build(config, first.shift(offset), today)
        for offset in range(last.ordinal - first.ordinal + 1)
    )


def list_periods(
    config: BillingPeriodConfig | None,
    reference_date: date,
    count: int,
    forward: int = 0,
    today: date | None = None,
    newest_first: bool = True,
) -> tuple[BillingPeriod, ...]:
    """
    Enumerate periods around ``reference_date``.

    Returns ``count`` periods ending with the one keyed for
    ``reference_date``, plus ``forward`` periods after it.  Ordered newest
    first unless ``newest_first`` is False.

    Raises:
        ValueError: if ``count < 1`` or ``forward < 0``.
    """
    config = _require_config(config)
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    if forward < 0:
        raise ValueError(f"forward must not be negative, got {forward}")
    anchor = period_key_for_date(config, reference_date)
    periods = periods_between(config, anchor.shift(-(count - 1)), anchor.shift(forward), today)
    if newest_first:
        return tuple(reversed(periods))
    return periods


def yearly_periods(
    config: BillingPeriodConfig | None,
    year: int,
    today: date | None = None,
) -> tuple[BillingPeriod, ...]:
    """The twelve periods keyed January through December of ``year``."""
    return periods_between(config, PeriodKey(year, 1), PeriodKey(year, 12), today)


def validate_billing_config(config: BillingPeriodConfig) -> list[str]:
    """
    Advisory warnings for a structurally valid config.

    Invalid day values never get here: ``BillingPeriodConfig`` rejects them
    on construction.
    """
    warnings: list[str] = []
    for name, day in (("start_day", config.start_day), ("end_day", config.end_day)):
        if day in _CLAMPED_DAYS:
            warnings.append(
                f"{name} {day} does not exist in every month; "
                f"shorter months use their last day"
            )
    if not config.is_contiguous:
        warnings.append(
            f"Periods from day {config.start_day} to day {config.end_day} "
            f"leave days between periods that belong to no period"
        )
    return warnings


class BillingPeriodResolver:
    """
    Resolver bound to one user's billing period config.

    Contract:
        No I/O, no clock access.  ``today`` is passed per call and only
        drives the ``is_current`` flag.
    Guarantees:
        - Identical inputs give identical periods.
        - Periods resolved for consecutive keys never overlap.
    Non-goals:
        - Does not persist or cache periods.
    """

    def __init__(self, config: BillingPeriodConfig | None):
        self.config = _require_config(config)

    @traced_engine("periods", "1.0", fingerprint_fields=("year", "month", "today"))
    def resolve(self, year: int, month: int, today: date | None = None) -> BillingPeriod:
        period = resolve_period(self.config, year, month, today)
        logger.debug(
            "period_resolved",
            extra={
                "period_code": period.code,
                "start_date": period.start_date,
                "end_date": period.end_date,
                "is_current": period.is_current,
            },
        )
        return period

    def resolve_key(self, key: PeriodKey, today: date | None = None) -> BillingPeriod:
        return self.resolve(key.year, key.month, today)

    def key_for(self, day: date) -> PeriodKey:
        return period_key_for_date(self.config, day)

    def containing(self, day: date, today: date | None = None) -> BillingPeriod | None:
        return period_containing(self.config, day, today)

    def current(self, today: date) -> BillingPeriod:
        """The period keyed for ``today`` (flagged current when it contains it)."""
        return self.resolve_key(self.key_for(today), today)

    def between(
        self, first: PeriodKey, last: PeriodKey, today: date | None = None
    ) -> tuple[BillingPeriod, ...]:
        return periods_between(self.config, first, last, today)

    @traced_engine(
        "periods", "1.0", fingerprint_fields=("reference_date", "count", "forward", "today")
    )
    def list_periods(
        self,
        reference_date: date,
        count: int,
        forward: int = 0,
        today: date | None = None,
        newest_first: bool = True,
    ) -> tuple[BillingPeriod, ...]:
        periods = list_periods(
            self.config, reference_date, count, forward, today, newest_first
        )
        logger.info(
            "periods_listed",
            extra={
                "count": len(periods),
                "first": periods[0].code,
                "last": periods[-1].code,
            },
        )
        return periods

    def year(self, year: int, today: date | None = None) -> tuple[BillingPeriod, ...]:
        return yearly_periods(self.config, year, today)

    def warnings(self) -> list[str]:
        return validate_billing_config(self.config)
