"""
minijob_engines.carryover -- Earnings carryover ledger across billing periods.

Responsibility:
    Fold an ordered sequence of ``PeriodEarnings`` into ``LedgerEntry``
    results, threading the carry balance forward: earnings above a period's
    limit are deferred into the next period rather than dropped or paid
    early.  Supports recomputing only the suffix of an existing ledger after
    a retroactive edit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import minijob_kernel/domain and sibling engines.
    Consumes minijob_engines.aggregation output and a limit lookup
    (normally a ``minijob_engines.limits.LimitSchedule``).

Invariants enforced:
    - Strict chronological fold: input keys must be consecutive and
      ascending; each period's result depends on the previous one.
    - Chaining: ``carry_in[i + 1] == carry_out[i]``.
    - ``actual = gross + carry_in``; ``paid = min(actual, limit)``;
      ``carry_out = max(0, actual - limit)``.  ``actual == limit`` carries
      nothing and does not exceed the limit.
    - Conservation: ``opening_carry + sum(gross) == sum(paid) + final
      carry_out``.  All amounts are whole cents, so the arithmetic is exact.
    - Idempotence: no clock, no randomness; identical inputs give identical
      ledgers.

Failure modes:
    - NoCurrentSettingError (a ConfigError) when the lookup finds no limit
      in force on a period's start date.  Never defaulted.
    - PeriodOverlapError when two input periods overlap.
    - ValueError when input is out of order, has a gap, or the opening
      carry is negative.

Usage:
    from minijob_engines.carryover import EarningsCarryoverLedger
    from minijob_engines.limits import LimitSchedule

    ledger = EarningsCarryoverLedger().build_ledger(earnings, LimitSchedule(limits))
    for entry in ledger:
        print(entry.period.code, entry.paid_this_period, entry.carry_out)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from minijob_kernel.domain.dtos import LedgerEntry, MinijobLimit, PeriodEarnings
from minijob_kernel.domain.values import round_money, to_decimal
from minijob_kernel.exceptions import NoCurrentSettingError, PeriodOverlapError
from minijob_kernel.logging_config import get_logger
from minijob_engines.tracer import traced_engine
from minijob_engines.warning import WarningClassifier

logger = get_logger("engines.carryover")

ZERO = Decimal("0.00")

LimitLookup = Callable[[date], MinijobLimit | Decimal | None]


@dataclass(frozen=True)
class LedgerTotals:
    """Sums over a ledger, used to verify conservation."""

    opening_carry: Decimal
    gross_earnings: Decimal
    paid: Decimal
    outstanding_carry: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.opening_carry + self.gross_earnings == self.paid + self.outstanding_carry


def _check_sequence(earnings: Sequence[PeriodEarnings]) -> None:
    for earlier, later in zip(earnings, earnings[1:]):
        if later.period.key < earlier.period.key:
            raise ValueError(
                f"Period earnings must be in ascending order: "
                f"{later.period.code} follows {earlier.period.code}"
            )
        if earlier.period.overlaps(later.period):
            raise PeriodOverlapError(later.period.code, earlier.period.code)
        if later.period.key != earlier.period.key.next():
            raise ValueError(
                f"Period earnings must be consecutive: "
                f"{later.period.code} follows {earlier.period.code}"
            )


def _resolve_limit(limit_lookup: LimitLookup, on_date: date) -> Decimal:
    found = limit_lookup(on_date)
    if found is None:
        raise NoCurrentSettingError(on_date)
    if isinstance(found, MinijobLimit):
        return round_money(found.amount)
    return round_money(to_decimal(found))


def ledger_totals(ledger: Sequence[LedgerEntry]) -> LedgerTotals:
    """Opening carry, gross, paid and the carry still outstanding at the end."""
    if not ledger:
        return LedgerTotals(ZERO, ZERO, ZERO, ZERO)
    return LedgerTotals(
        opening_carry=ledger[0].carry_in,
        gross_earnings=sum((entry.gross_earnings for entry in ledger), ZERO),
        paid=sum((entry.paid_this_period for entry in ledger), ZERO),
        outstanding_carry=ledger[-1].carry_out,
    )


class EarningsCarryoverLedger:
    """
    Pure left fold over period earnings with the carry as accumulator.

    Contract:
        No I/O, no clock access, fully deterministic.
    Guarantees:
        - Output has one ``LedgerEntry`` per input period, in input order.
        - Chaining and conservation hold for every output.
    Non-goals:
        - Does not decide where a fold starts; callers pass every period
          from the last zero-carry point (or an explicit opening carry).
        - Does not cache or persist ledgers.
    """

    def __init__(self, classifier: WarningClassifier | None = None):
        self.classifier = classifier or WarningClassifier()

    @traced_engine("carryover", "1.0", fingerprint_fields=("ordered_earnings", "opening_carry"))
    def build_ledger(
        self,
        ordered_earnings: Sequence[PeriodEarnings],
        limit_lookup: LimitLookup,
        opening_carry: Decimal | int | str = ZERO,
    ) -> tuple[LedgerEntry, ...]:
        """
        Fold ``ordered_earnings`` into ledger entries.

        Preconditions:
            ``ordered_earnings`` keys are consecutive and ascending.
            ``limit_lookup`` maps a date to the limit in force (a
            ``MinijobLimit`` or an amount), or None.

        Postconditions:
            ``result[0].carry_in == opening_carry``;
            ``result[i + 1].carry_in == result[i].carry_out``.

        Raises:
            NoCurrentSettingError: if no limit is in force for a period.
            PeriodOverlapError: if two periods overlap.
            ValueError: on unordered or gapped input, or a negative opening carry.
        """
        carry = round_money(to_decimal(opening_carry))
        if carry < 0:
            raise ValueError(f"Opening carry must not be negative, got {carry}")
        _check_sequence(ordered_earnings)

        entries: list[LedgerEntry] = []
        for earnings in ordered_earnings:
            period = earnings.period
            limit = _resolve_limit(limit_lookup, period.start_date)
            carry_in = carry
            actual = earnings.gross_earnings + carry_in

            if actual <= limit:
                paid, carry_out, exceeds = actual, ZERO, False
            else:
                paid, carry_out, exceeds = limit, actual - limit, True

            entries.append(
                LedgerEntry(
                    period=period,
                    gross_earnings=earnings.gross_earnings,
                    carry_in=carry_in,
                    actual_earnings=actual,
                    paid_this_period=paid,
                    carry_out=carry_out,
                    exceeds_limit=exceeds,
                    warning_level=self.classifier.classify(actual, limit),
                    limit=limit,
                    hourly_rate=earnings.hourly_rate,
                    entry_count=earnings.entry_count,
                    total_minutes=earnings.total_minutes,
                    total_hours=earnings.total_hours,
                )
            )
            if exceeds:
                logger.info(
                    "limit_exceeded",
                    extra={
                        "period_code": period.code,
                        "actual_earnings": actual,
                        "limit": limit,
                        "carry_out": carry_out,
                    },
                )
            carry = carry_out

        if entries:
            logger.info(
                "ledger_built",
                extra={
                    "periods": len(entries),
                    "first_period": entries[0].period.code,
                    "last_period": entries[-1].period.code,
                    "outstanding_carry": entries[-1].carry_out,
                },
            )
        return tuple(entries)

    def rebuild_from(
        self,
        previous_ledger: Sequence[LedgerEntry],
        earnings_from_edit: Sequence[PeriodEarnings],
        limit_lookup: LimitLookup,
    ) -> tuple[LedgerEntry, ...]:
        """
        Recompute a ledger after an edit in the first period of
        ``earnings_from_edit``.

        Entries before the edited period are kept unchanged; the edited
        period and every later one are recomputed, starting from the carry
        that flowed into the edited period.  ``earnings_from_edit`` must
        run through the end of the chain the caller wants back.

        Raises:
            ValueError: if ``earnings_from_edit`` is empty or does not
                continue the kept prefix.
        """
        if not earnings_from_edit:
            raise ValueError("Nothing to rebuild: no period earnings given")
        edited_key = earnings_from_edit[0].period.key

        prefix = tuple(entry for entry in previous_ledger if entry.period.key < edited_key)
        if prefix:
            if prefix[-1].period.key.next() != edited_key:
                raise ValueError(
                    f"Rebuild from {edited_key} does not continue the ledger "
                    f"ending at {prefix[-1].period.code}"
                )
            opening = prefix[-1].carry_out
        elif previous_ledger and previous_ledger[0].period.key == edited_key:
            opening = previous_ledger[0].carry_in
        else:
            opening = ZERO

        logger.info(
            "ledger_rebuild_started",
            extra={
                "period_code": edited_key.code,
                "kept_periods": len(prefix),
                "recomputed_periods": len(earnings_from_edit),
            },
        )
        suffix = self.build_ledger(earnings_from_edit, limit_lookup, opening)
        return prefix + suffix


def build_ledger(
    ordered_earnings: Sequence[PeriodEarnings],
    limit_lookup: LimitLookup,
    opening_carry: Decimal | int | str = ZERO,
    classifier: WarningClassifier | None = None,
) -> tuple[LedgerEntry, ...]:
    """Functional form of ``EarningsCarryoverLedger.build_ledger``."""
    return EarningsCarryoverLedger(classifier).build_ledger(
        ordered_earnings, limit_lookup, opening_carry
    )
