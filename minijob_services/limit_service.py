"""
LimitService -- maintains the global minijob limit history.

Responsibility:
    Add limits (closing an open-ended predecessor), re-chain the history,
    and seed an empty table from the policy file.

Invariants enforced:
    - The stored history never contains overlapping ranges; every write
      goes through ``LimitSchedule`` first.
    - Limits are global, not per user.

Failure modes:
    - LimitOverlapError when a new limit overlaps in a way that cannot be
      resolved by closing one open-ended limit.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select

from minijob_config.schema import MinijobPolicy
from minijob_engines.limits import LimitAdjustment, LimitSchedule, normalize_limit_chain
from minijob_kernel.domain.dtos import MinijobLimit
from minijob_kernel.logging_config import get_logger
from minijob_kernel.models.minijob_limit import MinijobLimitModel
from minijob_kernel.selectors.limit_selector import LimitSelector
from minijob_services.base import BaseService

logger = get_logger("services.limits")


class LimitService(BaseService):
    """Write operations on the limit history."""

    def _rows_by_start(self) -> dict[date, MinijobLimitModel]:
        rows = self.session.execute(select(MinijobLimitModel)).scalars()
        return {row.effective_from: row for row in rows}

    def add_limit(
        self,
        amount: Decimal | int | str,
        effective_from: date | str,
        effective_until: date | str | None = None,
        description: str | None = None,
    ) -> MinijobLimit:
        """
        Add a limit.  An open-ended limit starting earlier is closed the
        day before the new one starts.

        Raises:
            LimitOverlapError: for any other overlap.
            ConfigError: a non-positive amount or one finer than a cent.
        """
        new_limit = MinijobLimit(amount, effective_from, effective_until, description)
        current = LimitSchedule(LimitSelector(self.session).all_limits())
        updated = current.with_limit(new_limit)

        rows = self._rows_by_start()
        for limit in updated:
            row = rows.get(limit.effective_from)
            if row is not None and row.effective_until != limit.effective_until:
                row.effective_until = limit.effective_until

        self.session.add(
            MinijobLimitModel(
                amount=new_limit.amount,
                effective_from=new_limit.effective_from,
                effective_until=new_limit.effective_until,
                description=new_limit.description,
            )
        )
        self.session.flush()
        logger.info(
            "limit_added",
            extra={
                "amount": new_limit.amount,
                "effective_from": new_limit.effective_from,
                "effective_until": new_limit.effective_until,
            },
        )
        return new_limit

    def normalize(self) -> list[LimitAdjustment]:
        """Re-chain stored limits so each ends the day before the next starts."""
        chained, adjustments = normalize_limit_chain(LimitSelector(self.session).all_limits())
        rows = self._rows_by_start()
        for limit in chained:
            rows[limit.effective_from].effective_until = limit.effective_until
        self.session.flush()
        return adjustments

    def seed_from_policy(self, policy: MinijobPolicy) -> int:
        """Insert the policy's limits into an empty table; returns rows added."""
        if LimitSelector(self.session).all_limits():
            return 0
        for limit in policy.limits:
            self.session.add(
                MinijobLimitModel(
                    amount=limit.amount,
                    effective_from=limit.effective_from,
                    effective_until=limit.effective_until,
                    description=limit.description,
                )
            )
        self.session.flush()
        logger.info("limits_seeded", extra={"count": len(policy.limits), "policy": policy.name})
        return len(policy.limits)
