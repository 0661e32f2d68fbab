"""ORM models. Importing this package registers every table on Base.metadata."""

from minijob_kernel.models.billing_setting import BillingSettingModel
from minijob_kernel.models.minijob_limit import MinijobLimitModel
from minijob_kernel.models.time_entry import TimeEntryModel

__all__ = [
    "BillingSettingModel",
    "MinijobLimitModel",
    "TimeEntryModel",
]
