"""
minijob_engines.limits -- Statutory minijob limit history and lookup.

Responsibility:
    Hold the ordered, non-overlapping history of ``MinijobLimit`` records
    and answer "which limit is in force on this date".  The schedule is
    callable and is the ``limit_lookup`` handed to the carryover ledger.
    Also provides the two maintenance operations used when limits are
    edited: closing an open-ended limit when a successor is added, and
    re-chaining a whole history so each limit ends the day before the
    next one starts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import minijob_kernel/domain and minijob_kernel/exceptions.

Invariants enforced:
    - Limits are sorted by ``effective_from``.
    - No two limits overlap (checked pairwise after sorting, which is
      sufficient for interval ranges).
    - At most one limit is in force on any date.

Failure modes:
    - LimitOverlapError for overlapping ranges, on construction and on
      ``with_limit``.
    - NoCurrentSettingError from ``require`` when no limit is in force.

Usage:
    from minijob_engines.limits import LimitSchedule

    schedule = LimitSchedule(policy.limits)
    limit = schedule.require(date(2024, 4, 1))   # 538.00
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from datetime import date, timedelta

from minijob_kernel.domain.dtos import MinijobLimit
from minijob_kernel.exceptions import LimitOverlapError, NoCurrentSettingError
from minijob_kernel.logging_config import get_logger

logger = get_logger("engines.limits")


@dataclass(frozen=True)
class LimitAdjustment:
    """One change made to a limit's end date while re-chaining."""

    effective_from: date
    previous_until: date | None
    new_until: date | None


def _check_no_overlap(limits: tuple[MinijobLimit, ...]) -> None:
    for earlier, later in zip(limits, limits[1:]):
        if earlier.overlaps(later):
            raise LimitOverlapError(
                later.effective_from,
                later.effective_until,
                earlier.effective_from,
                earlier.effective_until,
            )


class LimitSchedule:
    """
    Immutable, validated limit history.

    Contract:
        Constructed from any iterable of limits; rejects overlaps.
    Guarantees:
        - ``limits`` is sorted ascending by ``effective_from``.
        - Calling the schedule with a date returns the limit in force or None.
    """

    def __init__(self, limits: Iterable[MinijobLimit] = ()):
        ordered = tuple(sorted(limits, key=lambda limit: limit.effective_from))
        _check_no_overlap(ordered)
        self._limits = ordered

    @property
    def limits(self) -> tuple[MinijobLimit, ...]:
        return self._limits

    def __iter__(self) -> Iterator[MinijobLimit]:
        return iter(self._limits)

    def __len__(self) -> int:
        return len(self._limits)

    def __repr__(self) -> str:
        return f"LimitSchedule({len(self._limits)} limits)"

    def effective_on(self, day: date) -> MinijobLimit | None:
        for limit in self._limits:
            if limit.is_effective_on(day):
                return limit
        return None

    __call__ = effective_on

    def require(self, day: date) -> MinijobLimit:
        """The limit in force on ``day``; a missing limit is a config bug."""
        limit = self.effective_on(day)
        if limit is None:
            raise NoCurrentSettingError(day)
        return limit

    def current(self, today: date) -> MinijobLimit | None:
        return self.effective_on(today)

    def with_limit(self, new_limit: MinijobLimit) -> LimitSchedule:
        """
        A new schedule with ``new_limit`` added.

        If the only overlapping limit is an open-ended one starting before
        ``new_limit``, it is closed the day before ``new_limit`` starts.
        Any other overlap is refused.

        Raises:
            LimitOverlapError: for an overlap that cannot be resolved.
        """
        conflicts = [limit for limit in self._limits if limit.overlaps(new_limit)]
        kept = [limit for limit in self._limits if not limit.overlaps(new_limit)]

        if conflicts:
            conflict = conflicts[0]
            closable = (
                len(conflicts) == 1
                and conflict.effective_until is None
                and conflict.effective_from < new_limit.effective_from
            )
            if not closable:
                raise LimitOverlapError(
                    new_limit.effective_from,
                    new_limit.effective_until,
                    conflict.effective_from,
                    conflict.effective_until,
                )
            closed = replace(
                conflict, effective_until=new_limit.effective_from - timedelta(days=1)
            )
            logger.info(
                "open_limit_closed",
                extra={
                    "effective_from": conflict.effective_from,
                    "effective_until": closed.effective_until,
                    "successor_from": new_limit.effective_from,
                },
            )
            kept.append(closed)

        return LimitSchedule([*kept, new_limit])


def normalize_limit_chain(
    limits: Iterable[MinijobLimit],
) -> tuple[tuple[MinijobLimit, ...], list[LimitAdjustment]]:
    """
    Re-chain a limit history: each limit ends the day before the next one
    starts and the last one is open-ended.

    Returns the re-chained limits (sorted) and the adjustments made.

    Raises:
        LimitOverlapError: if two limits start on the same day.
    """
    ordered = sorted(limits, key=lambda limit: limit.effective_from)
    for earlier, later in zip(ordered, ordered[1:]):
        if earlier.effective_from == later.effective_from:
            raise LimitOverlapError(
                later.effective_from,
                later.effective_until,
                earlier.effective_from,
                earlier.effective_until,
            )

    chained: list[MinijobLimit] = []
    adjustments: list[LimitAdjustment] = []
    for index, limit in enumerate(ordered):
        if index + 1 < len(ordered):
            new_until: date | None = ordered[index + 1].effective_from - timedelta(days=1)
        else:
            new_until = None
        if limit.effective_until != new_until:
            adjustments.append(
                LimitAdjustment(limit.effective_from, limit.effective_until, new_until)
            )
            limit = replace(limit, effective_until=new_until)
        chained.append(limit)

    if adjustments:
        logger.info("limit_chain_normalized", extra={"adjustments": len(adjustments)})
    return tuple(chained), adjustments
