"""
Module: minijob_kernel.selectors.limit_selector
Responsibility: Read the minijob limit history as ``MinijobLimit`` DTOs,
    ordered by ``effective_from``.
"""

from sqlalchemy import select

from minijob_kernel.domain.dtos import MinijobLimit
from minijob_kernel.models.minijob_limit import MinijobLimitModel
from minijob_kernel.selectors.base import BaseSelector


class LimitSelector(BaseSelector):
    """Minijob limit queries."""

    def all_limits(self) -> tuple[MinijobLimit, ...]:
        rows = self.session.execute(
            select(MinijobLimitModel).order_by(MinijobLimitModel.effective_from)
        ).scalars()
        return tuple(
            MinijobLimit(
                amount=row.amount,
                effective_from=row.effective_from,
                effective_until=row.effective_until,
                description=row.description,
            )
            for row in rows
        )
