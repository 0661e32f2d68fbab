"""
Config-to-engine bridges (``minijob_config.bridges``).

Translate the frozen policy into the engine inputs the services use.  The
engines never import ``minijob_config``; this module is the one-way seam.
"""

from __future__ import annotations

from minijob_config.schema import MinijobPolicy
from minijob_engines.limits import LimitSchedule
from minijob_engines.warning import WarningClassifier, WarningThresholds
from minijob_kernel.domain.dtos import BillingPeriodConfig


def warning_thresholds_from_policy(policy: MinijobPolicy) -> WarningThresholds:
    return WarningThresholds(
        warning_ratio=policy.warning_thresholds.warning_ratio,
        critical_ratio=policy.warning_thresholds.critical_ratio,
    )


def warning_classifier_from_policy(policy: MinijobPolicy) -> WarningClassifier:
    return WarningClassifier(warning_thresholds_from_policy(policy))


def limit_schedule_from_policy(policy: MinijobPolicy) -> LimitSchedule:
    return LimitSchedule(policy.limits)


def default_period_config(policy: MinijobPolicy) -> BillingPeriodConfig:
    defaults = policy.billing_period_defaults
    return BillingPeriodConfig(defaults.start_day, defaults.end_day)
