"""
Module: minijob_kernel.models.billing_setting
Responsibility: ORM persistence for a user's billing period days and hourly rate.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One row per user (uq_billing_setting_user).
    - Day ranges and the rate are validated when the row is converted to a
      ``UserBillingConfig`` DTO; an invalid row fails loudly at read time.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from minijob_kernel.db.base import TrackedBase, UUIDString


class BillingSettingModel(TrackedBase):
    """Recurring billing period configuration of one employee."""

    __tablename__ = "billing_settings"

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_billing_setting_user"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    # Days of month, 1..31; start > end wraps into the following month
    start_day: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    end_day: Mapped[int] = mapped_column(Integer, nullable=False, default=31)

    hourly_rate: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return (
            f"<BillingSettingModel user={self.user_id} "
            f"{self.start_day}..{self.end_day} rate={self.hourly_rate}>"
        )
