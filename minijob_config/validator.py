"""
Policy Validator (``minijob_config.validator``).

Responsibility
--------------
Validates a parsed ``MinijobPolicy`` before it is handed to runtime code.

Invariants enforced
-------------------
* Warning thresholds are positive and ``warning_ratio <= critical_ratio``.
* Entry rules are sane: minimum work minutes positive, break maximum
  not negative.
* Default billing days are in 1..31.
* At least one limit is defined and no two limits overlap.

Failure modes
-------------
* Validation errors (``PolicyValidationResult.errors``)  -> the policy
  MUST NOT be used.
* Validation warnings (``PolicyValidationResult.warnings``)  -> the policy
  may be used but should be reviewed (gaps between limits, a closed last
  limit, default days that do not exist in every month).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from minijob_config.schema import MinijobPolicy


@dataclass
class PolicyValidationResult:
    """
    Result of policy validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block use of the policy.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_policy(policy: MinijobPolicy) -> PolicyValidationResult:
    """
    Validate a parsed policy.

    Postconditions:
        - Returns a ``PolicyValidationResult``; never raises.
    """
    result = PolicyValidationResult()

    _validate_thresholds(policy, result)
    _validate_time_entries(policy, result)
    _validate_billing_defaults(policy, result)
    _validate_limits(policy, result)

    if len(policy.currency) != 3 or not policy.currency.isalpha():
        result.add_error(f"currency must be a 3-letter code, got {policy.currency!r}")

    return result


def _validate_thresholds(policy: MinijobPolicy, result: PolicyValidationResult) -> None:
    thresholds = policy.warning_thresholds
    if thresholds.warning_ratio <= 0:
        result.add_error(
            f"warning_ratio must be positive, got {thresholds.warning_ratio}"
        )
    if thresholds.critical_ratio < thresholds.warning_ratio:
        result.add_error(
            f"critical_ratio ({thresholds.critical_ratio}) must not be below "
            f"warning_ratio ({thresholds.warning_ratio})"
        )


def _validate_time_entries(policy: MinijobPolicy, result: PolicyValidationResult) -> None:
    rules = policy.time_entries
    if rules.minimum_work_minutes < 1:
        result.add_error(
            f"minimum_work_minutes must be positive, got {rules.minimum_work_minutes}"
        )
    if rules.maximum_break_minutes < 0:
        result.add_error(
            f"maximum_break_minutes must not be negative, got {rules.maximum_break_minutes}"
        )


def _validate_billing_defaults(policy: MinijobPolicy, result: PolicyValidationResult) -> None:
    defaults = policy.billing_period_defaults
    for name, day in (("start_day", defaults.start_day), ("end_day", defaults.end_day)):
        if not 1 <= day <= 31:
            result.add_error(f"billing_period_defaults.{name} must be 1..31, got {day}")
        elif day >= 29 and not (name == "end_day" and day == 31):
            result.add_warning(
                f"billing_period_defaults.{name} {day} does not exist in every month"
            )


def _validate_limits(policy: MinijobPolicy, result: PolicyValidationResult) -> None:
    if not policy.limits:
        result.add_error("At least one minijob limit must be defined")
        return

    ordered = sorted(policy.limits, key=lambda limit: limit.effective_from)
    for earlier, later in zip(ordered, ordered[1:]):
        if earlier.overlaps(later):
            result.add_error(
                f"Limit from {later.effective_from} overlaps limit from "
                f"{earlier.effective_from}"
            )
        elif earlier.effective_until + timedelta(days=1) != later.effective_from:
            result.add_warning(
                f"No limit in force between {earlier.effective_until} and "
                f"{later.effective_from}"
            )

    if ordered[-1].effective_until is not None:
        result.add_warning(
            f"Last limit ends on {ordered[-1].effective_until}; no limit is in force after it"
        )
