"""
BillingConfigService -- writes a user's billing period configuration.

Responsibility:
    Create or update the per-user start day, end day and hourly rate.

Invariants enforced:
    - Days are validated through ``BillingPeriodConfig`` (1..31).
    - Period days are frozen once the user has time entries: changing
      them would silently move existing entries between periods.  The
      hourly rate may change at any time.

Failure modes:
    - InvalidBillingConfigError for out-of-range days or a day change
      after entries exist.
    - InvalidHourlyRateError for a non-positive rate or one finer than a cent.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from minijob_engines.periods import BillingPeriodResolver
from minijob_kernel.domain.dtos import BillingPeriodConfig, UserBillingConfig
from minijob_kernel.exceptions import InvalidBillingConfigError
from minijob_kernel.logging_config import get_logger
from minijob_kernel.models.billing_setting import BillingSettingModel
from minijob_kernel.selectors.time_entry_selector import TimeEntrySelector
from minijob_services.base import BaseService

logger = get_logger("services.billing_config")


class BillingConfigService(BaseService):
    """Create and update billing configurations."""

    def configure(
        self,
        user_id: UUID,
        start_day: int,
        end_day: int,
        hourly_rate: Decimal | int | str,
    ) -> UserBillingConfig:
        """
        Store the billing configuration of ``user_id``.

        Postconditions:
            The row is flushed; advisory warnings (clamped days, gaps
            between periods) are logged.

        Raises:
            InvalidBillingConfigError: invalid days, or days changed while
                time entries exist.
            InvalidHourlyRateError: non-positive rate, or digits below a cent.
        """
        config = UserBillingConfig(
            user_id=user_id,
            period_config=BillingPeriodConfig(start_day, end_day),
            hourly_rate=hourly_rate,
        )

        row = self.session.execute(
            select(BillingSettingModel).where(BillingSettingModel.user_id == user_id)
        ).scalar_one_or_none()

        if row is None:
            row = BillingSettingModel(
                user_id=user_id,
                start_day=start_day,
                end_day=end_day,
                hourly_rate=config.hourly_rate,
            )
            self.session.add(row)
        else:
            days_changed = (row.start_day, row.end_day) != (start_day, end_day)
            if days_changed and TimeEntrySelector(self.session).count(user_id) > 0:
                raise InvalidBillingConfigError(
                    start_day,
                    end_day,
                    "period days cannot change once time entries exist",
                )
            row.start_day = start_day
            row.end_day = end_day
            row.hourly_rate = config.hourly_rate

        self.session.flush()

        for warning in BillingPeriodResolver(config.period_config).warnings():
            logger.warning(
                "billing_config_warning",
                extra={"user_id": str(user_id), "detail": warning},
            )
        logger.info(
            "billing_config_saved",
            extra={
                "user_id": str(user_id),
                "start_day": start_day,
                "end_day": end_day,
                "hourly_rate": config.hourly_rate,
            },
        )
        return config
