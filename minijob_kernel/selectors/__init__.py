"""Read-only selectors returning domain DTOs."""

from minijob_kernel.selectors.billing_setting_selector import BillingSettingSelector
from minijob_kernel.selectors.limit_selector import LimitSelector
from minijob_kernel.selectors.time_entry_selector import TimeEntrySelector

__all__ = [
    "BillingSettingSelector",
    "LimitSelector",
    "TimeEntrySelector",
]
