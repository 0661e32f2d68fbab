"""
Module: minijob_kernel.models.minijob_limit
Responsibility: ORM persistence for the statutory monthly earnings cap history.
Architecture position: Kernel > Models.  May import from db/base.py only.

Non-goals:
    - This model does NOT enforce non-overlapping ranges; ``LimitSchedule``
      rejects overlaps when the rows are loaded, and writes are expected to
      go through ``LimitSchedule.with_limit``.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from minijob_kernel.db.base import TrackedBase


class MinijobLimitModel(TrackedBase):
    """A monthly earnings cap effective over an inclusive date range."""

    __tablename__ = "minijob_limits"

    __table_args__ = (
        Index("idx_minijob_limit_from", "effective_from"),
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    # NULL means open-ended
    effective_until: Mapped[date | None] = mapped_column(Date, nullable=True)

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<MinijobLimitModel {self.amount} "
            f"{self.effective_from}..{self.effective_until or 'open'}>"
        )
