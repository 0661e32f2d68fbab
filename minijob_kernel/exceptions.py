"""
Typed Exception Hierarchy for the Minijob Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Earnings computations must fail loudly and precisely. Callers (a REST
layer, a UI, a batch job) decide the user-facing message, so they need to
catch by type and read structured fields, not parse message strings:

    try:
        summary = ledger_service.period_summary(user_id, 2024, 4)
    except NoCurrentSettingError as e:
        api_response(code=e.code, on_date=e.on_date)
    except ConfigError as e:
        log.error(f"Billing configuration broken: {e.code}")

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    MinijobKernelError (base)
    |
    +-- ValidationError
    |   +-- MalformedInputError
    |   +-- InvalidTimeRangeError
    |   +-- BelowMinimumDurationError
    |   +-- BreakOutOfRangeError
    |
    +-- ConfigError
    |   +-- InvalidBillingConfigError
    |   +-- MissingBillingConfigError
    |   +-- InvalidHourlyRateError
    |   +-- NoCurrentSettingError
    |   +-- PolicyValidationError
    |
    +-- OverlapError
    |   +-- LimitOverlapError
    |   +-- PeriodOverlapError
    |
    +-- TimeEntryNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                       | When Raised
------------|----------------------------|--------------------------------------
Validation  | MALFORMED_INPUT            | Bad date/time string or number
            | INVALID_TIME_RANGE         | Start and end time are identical
            | BELOW_MINIMUM_DURATION     | Worked minutes under the minimum
            | BREAK_OUT_OF_RANGE         | Break outside 0..480 minutes
------------|----------------------------|--------------------------------------
Config      | INVALID_BILLING_CONFIG     | Start/end day outside 1..31
            | MISSING_BILLING_CONFIG     | User has no period configuration
            | INVALID_HOURLY_RATE        | Hourly rate zero or negative
            | NO_CURRENT_SETTING         | No minijob limit in force on a date
            | POLICY_VALIDATION_FAILED   | Policy file failed validation
------------|----------------------------|--------------------------------------
Overlap     | LIMIT_OVERLAP              | Two limit records overlap
            | PERIOD_OVERLAP             | Two resolved periods overlap
------------|----------------------------|--------------------------------------
Lookup      | TIME_ENTRY_NOT_FOUND       | Entry ID does not exist

===============================================================================
PROPAGATION
===============================================================================

The kernel never retries and never recovers. Every error aborts the single
computation it occurred in. The one documented default is an absent carry
at the start of a ledger fold, which is zero and not an error.
"""

from datetime import date


class MinijobKernelError(Exception):
    """
    Base exception for all minijob kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "MINIJOB_KERNEL_ERROR"


# Validation exceptions


class ValidationError(MinijobKernelError):
    """Base exception for malformed time entries and inputs."""

    code: str = "VALIDATION_ERROR"


class MalformedInputError(ValidationError):
    """A date, time or numeric field could not be parsed."""

    code: str = "MALFORMED_INPUT"

    def __init__(self, field: str, value: object, expected: str):
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(f"Malformed {field}: {value!r} (expected {expected})")


class InvalidTimeRangeError(ValidationError):
    """Start and end time of a shift do not form a valid range."""

    code: str = "INVALID_TIME_RANGE"

    def __init__(self, start_time: str, end_time: str):
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"End time {end_time} must differ from start time {start_time}"
        )


class BelowMinimumDurationError(ValidationError):
    """Worked minutes after subtracting the break are under the minimum."""

    code: str = "BELOW_MINIMUM_DURATION"

    def __init__(self, worked_minutes: int, minimum_minutes: int):
        self.worked_minutes = worked_minutes
        self.minimum_minutes = minimum_minutes
        super().__init__(
            f"Worked time of {worked_minutes} minutes is below the "
            f"minimum of {minimum_minutes} minutes"
        )


class BreakOutOfRangeError(ValidationError):
    """Break minutes are negative or exceed the maximum."""

    code: str = "BREAK_OUT_OF_RANGE"

    def __init__(self, break_minutes: int, maximum_minutes: int):
        self.break_minutes = break_minutes
        self.maximum_minutes = maximum_minutes
        super().__init__(
            f"Break of {break_minutes} minutes must be between 0 and "
            f"{maximum_minutes} minutes"
        )


# Configuration exceptions


class ConfigError(MinijobKernelError):
    """Base exception for missing or invalid configuration."""

    code: str = "CONFIG_ERROR"


class InvalidBillingConfigError(ConfigError):
    """Billing period start or end day outside 1..31."""

    code: str = "INVALID_BILLING_CONFIG"

    def __init__(self, start_day: object, end_day: object, reason: str):
        self.start_day = start_day
        self.end_day = end_day
        self.reason = reason
        super().__init__(
            f"Invalid billing period {start_day}..{end_day}: {reason}"
        )


class MissingBillingConfigError(ConfigError):
    """A user has no billing period configuration."""

    code: str = "MISSING_BILLING_CONFIG"

    def __init__(self, user_id: object):
        self.user_id = user_id
        super().__init__(f"No billing period configuration for user {user_id}")


class InvalidHourlyRateError(ConfigError):
    """Hourly rate is zero, negative or finer than a cent."""

    code: str = "INVALID_HOURLY_RATE"

    def __init__(self, hourly_rate: object, reason: str = "must be positive"):
        self.hourly_rate = hourly_rate
        self.reason = reason
        super().__init__(f"Hourly rate {reason}, got {hourly_rate}")


class NoCurrentSettingError(ConfigError):
    """
    No minijob limit is in force on the required date.

    A missing limit is a configuration bug, never a zero-earnings case.
    """

    code: str = "NO_CURRENT_SETTING"

    def __init__(self, on_date: date):
        self.on_date = on_date
        super().__init__(f"NoCurrentSetting: no minijob limit in force on {on_date}")


class PolicyValidationError(ConfigError):
    """The minijob policy file failed validation."""

    code: str = "POLICY_VALIDATION_FAILED"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Minijob policy validation failed: {len(errors)} error(s): "
            + "; ".join(errors)
        )


# Overlap exceptions


class OverlapError(MinijobKernelError):
    """Base exception for overlapping date ranges."""

    code: str = "OVERLAP_ERROR"


class LimitOverlapError(OverlapError):
    """Two minijob limit records have overlapping effective ranges."""

    code: str = "LIMIT_OVERLAP"

    def __init__(
        self,
        effective_from: date,
        effective_until: date | None,
        conflicting_from: date,
        conflicting_until: date | None,
    ):
        self.effective_from = effective_from
        self.effective_until = effective_until
        self.conflicting_from = conflicting_from
        self.conflicting_until = conflicting_until
        super().__init__(
            f"Limit {effective_from}..{effective_until or 'open'} overlaps "
            f"limit {conflicting_from}..{conflicting_until or 'open'}"
        )


class PeriodOverlapError(OverlapError):
    """Two resolved billing periods overlap."""

    code: str = "PERIOD_OVERLAP"

    def __init__(self, period_code: str, conflicting_code: str):
        self.period_code = period_code
        self.conflicting_code = conflicting_code
        super().__init__(
            f"Billing period {period_code} overlaps period {conflicting_code}"
        )


# Lookup exceptions


class TimeEntryNotFoundError(MinijobKernelError):
    """Time entry with given ID was not found."""

    code: str = "TIME_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: object):
        self.entry_id = entry_id
        super().__init__(f"Time entry not found: {entry_id}")
