"""
Module: minijob_kernel.selectors.billing_setting_selector
Responsibility: Read a user's billing configuration as a ``UserBillingConfig``.

Failure modes:
    - MissingBillingConfigError when the user has no row.  A user must have a
      period configuration before time entries can be recorded or evaluated.
    - InvalidBillingConfigError / InvalidHourlyRateError if the stored row is
      out of range.
"""

from uuid import UUID

from sqlalchemy import select

from minijob_kernel.domain.dtos import BillingPeriodConfig, UserBillingConfig
from minijob_kernel.exceptions import MissingBillingConfigError
from minijob_kernel.models.billing_setting import BillingSettingModel
from minijob_kernel.selectors.base import BaseSelector


class BillingSettingSelector(BaseSelector):
    """Billing configuration queries."""

    def find(self, user_id: UUID) -> UserBillingConfig | None:
        row = self.session.execute(
            select(BillingSettingModel).where(BillingSettingModel.user_id == user_id)
        ).scalar_one_or_none()
        if row is None:
            return None
        return UserBillingConfig(
            user_id=row.user_id,
            period_config=BillingPeriodConfig(row.start_day, row.end_day),
            hourly_rate=row.hourly_rate,
        )

    def require(self, user_id: UUID) -> UserBillingConfig:
        config = self.find(user_id)
        if config is None:
            raise MissingBillingConfigError(user_id)
        return config
