"""
minijob_engines.aggregation -- Worked time and gross earnings per billing period.

Responsibility:
    Reduce a set of validated ``TimeEntry`` records to one
    ``PeriodEarnings`` for a resolved ``BillingPeriod``: entry count, total
    worked minutes, total hours and gross earnings at an hourly rate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import minijob_kernel/domain.
    Consumes periods from minijob_engines.periods; feeds
    minijob_engines.carryover.

Invariants enforced:
    - Only entries whose date lies inside the period's inclusive range count.
    - Worked minutes are ``(end - start) - break``, with one overnight wrap.
      Entry-level validation (minimum duration, break range) happened at
      construction of each ``TimeEntry``; nothing is dropped here.
    - Gross earnings are ``minutes * rate / 60`` rounded half-up to cents
      exactly once, after summing, never per entry.
    - Decimal-only: a float hourly rate is refused.

Failure modes:
    - ValueError for a float hourly rate.
    - InvalidHourlyRateError for a zero or negative rate.

Usage:
    from minijob_engines.aggregation import TimeEntryAggregator

    earnings = TimeEntryAggregator().aggregate(entries, period, Decimal("12.00"))
    print(earnings.gross_earnings)
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from minijob_kernel.domain.dtos import BillingPeriod, PeriodEarnings, TimeEntry
from minijob_kernel.domain.values import minutes_to_hours, round_money, to_decimal
from minijob_kernel.exceptions import InvalidHourlyRateError
from minijob_kernel.logging_config import get_logger
from minijob_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")


def entries_in_period(
    entries: Iterable[TimeEntry], period: BillingPeriod
) -> tuple[TimeEntry, ...]:
    """Entries dated inside ``period``, ordered by date then start time."""
    selected = [entry for entry in entries if period.contains(entry.entry_date)]
    selected.sort(key=lambda e: (e.entry_date, e.start_time))
    return tuple(selected)


def earnings_for_minutes(minutes: int, hourly_rate: Decimal) -> Decimal:
    """Gross pay for ``minutes`` of work, rounded once to cents."""
    return round_money(Decimal(minutes) * hourly_rate / Decimal(60))


class TimeEntryAggregator:
    """
    Pure aggregator of time entries into period earnings.

    Contract:
        No I/O, no clock access, fully deterministic.
    Guarantees:
        - ``total_minutes`` is the exact integer sum of worked minutes.
        - ``gross_earnings`` carries one rounding step.
    Non-goals:
        - Multiple rates, surcharges or partial-day pay scales.
    """

    @traced_engine("aggregation", "1.0", fingerprint_fields=("entries", "period", "hourly_rate"))
    def aggregate(
        self,
        entries: Iterable[TimeEntry],
        period: BillingPeriod,
        hourly_rate: Decimal | int | str,
    ) -> PeriodEarnings:
        """
        Aggregate ``entries`` falling inside ``period``.

        Preconditions:
            Every entry is a constructed ``TimeEntry`` (already validated).
            ``hourly_rate`` is positive and not a float.

        Postconditions:
            ``entry_count`` counts only entries inside the period;
            ``total_hours`` is ``total_minutes / 60`` rounded to 2 places.

        Raises:
            ValueError: if ``hourly_rate`` is a float.
            InvalidHourlyRateError: if ``hourly_rate`` is not positive.
        """
        rate = to_decimal(hourly_rate)
        if rate <= 0:
            raise InvalidHourlyRateError(hourly_rate)

        selected = entries_in_period(entries, period)
        total_minutes = sum(entry.worked_minutes for entry in selected)

        result = PeriodEarnings(
            period=period,
            entry_count=len(selected),
            total_minutes=total_minutes,
            total_hours=minutes_to_hours(total_minutes),
            gross_earnings=earnings_for_minutes(total_minutes, rate),
            hourly_rate=rate,
        )
        logger.debug(
            "period_aggregated",
            extra={
                "period_code": period.code,
                "entry_count": result.entry_count,
                "total_minutes": total_minutes,
                "gross_earnings": result.gross_earnings,
            },
        )
        return result

    def aggregate_many(
        self,
        entries: Iterable[TimeEntry],
        periods: Iterable[BillingPeriod],
        hourly_rate: Decimal | int | str,
    ) -> tuple[PeriodEarnings, ...]:
        """Aggregate the same entries into each of ``periods``, in order."""
        pool = tuple(entries)
        return tuple(self.aggregate(pool, period, hourly_rate) for period in periods)
