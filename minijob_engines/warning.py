"""
minijob_engines.warning -- Earnings-to-limit risk classification.

Responsibility:
    Map a period's actual earnings relative to its limit to a discrete
    ``WarningLevel`` for display.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Thresholds come from the minijob policy (minijob_config); defaults
    match the shipped policy.

Invariants enforced:
    - safe:     actual / limit <  warning_ratio
    - warning:  warning_ratio <= actual / limit <= critical_ratio
    - critical: actual / limit >  critical_ratio
    - Comparisons multiply the limit instead of dividing, so no rounding
      enters the classification.

Failure modes:
    - ConfigError for a non-positive limit or inconsistent thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from minijob_kernel.domain.dtos import WarningLevel
from minijob_kernel.domain.values import round_money, to_decimal
from minijob_kernel.exceptions import ConfigError


@dataclass(frozen=True)
class WarningThresholds:
    """Ratios of actual earnings to limit at which the level changes."""

    warning_ratio: Decimal = Decimal("0.8")
    critical_ratio: Decimal = Decimal("1.0")

    def __post_init__(self) -> None:
        warning = to_decimal(self.warning_ratio)
        critical = to_decimal(self.critical_ratio)
        if warning <= 0:
            raise ConfigError(f"warning_ratio must be positive, got {warning}")
        if critical < warning:
            raise ConfigError(
                f"critical_ratio ({critical}) must not be below warning_ratio ({warning})"
            )
        object.__setattr__(self, "warning_ratio", warning)
        object.__setattr__(self, "critical_ratio", critical)


def usage_percent(actual_earnings: Decimal, limit: Decimal) -> Decimal:
    """Actual earnings as a percentage of the limit, 2 places."""
    if limit <= 0:
        raise ConfigError(f"Minijob limit must be positive, got {limit}")
    return round_money(actual_earnings * Decimal(100) / limit)


class WarningClassifier:
    """
    Pure classifier of earnings against a limit.

    Contract:
        No I/O, deterministic.
    """

    def __init__(self, thresholds: WarningThresholds | None = None):
        self.thresholds = thresholds or WarningThresholds()

    def classify(self, actual_earnings: Decimal, limit: Decimal) -> WarningLevel:
        actual = to_decimal(actual_earnings)
        limit = to_decimal(limit)
        if limit <= 0:
            raise ConfigError(f"Minijob limit must be positive, got {limit}")
        if actual > limit * self.thresholds.critical_ratio:
            return WarningLevel.CRITICAL
        if actual >= limit * self.thresholds.warning_ratio:
            return WarningLevel.WARNING
        return WarningLevel.SAFE
