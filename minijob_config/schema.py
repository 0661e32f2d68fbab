"""
MinijobPolicy schema.

Defines the typed, frozen form of the policy file.  YAML is parsed into
these types by the loader and checked by the validator; runtime code only
ever sees a ``MinijobPolicy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from minijob_kernel.domain.dtos import MinijobLimit


@dataclass(frozen=True)
class WarningThresholdsDef:
    """Ratios of actual earnings to limit at which warnings start."""

    warning_ratio: Decimal = Decimal("0.8")
    critical_ratio: Decimal = Decimal("1.0")


@dataclass(frozen=True)
class TimeEntryRulesDef:
    """Entry-level validation rules."""

    minimum_work_minutes: int = 15
    maximum_break_minutes: int = 480


@dataclass(frozen=True)
class BillingPeriodDefaultsDef:
    """Period days applied when a new user gets a billing config."""

    start_day: int = 1
    end_day: int = 31


@dataclass(frozen=True)
class MinijobPolicy:
    """The complete, validated minijob policy."""

    name: str
    version: int
    currency: str
    warning_thresholds: WarningThresholdsDef
    time_entries: TimeEntryRulesDef
    billing_period_defaults: BillingPeriodDefaultsDef
    limits: tuple[MinijobLimit, ...]
    checksum: str = ""
