"""
Module: minijob_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    minijob_services and host applications.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import minijob_kernel domain modules (and sibling engines).
    MUST NOT import minijob_services or minijob_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      "Today" is passed in as an explicit parameter by the services.
    - Decimal-only arithmetic: floats are refused for rates and amounts.
    - Determinism: identical inputs always produce identical outputs.

Data flow:
    BillingPeriodResolver -> TimeEntryAggregator -> EarningsCarryoverLedger
    -> WarningClassifier (applied inside the ledger fold)

Usage:
    from minijob_engines import (
        BillingPeriodResolver,
        EarningsCarryoverLedger,
        LimitSchedule,
        TimeEntryAggregator,
    )
"""

from minijob_kernel.logging_config import get_logger

logger = get_logger("engines")

from minijob_engines.aggregation import (
    TimeEntryAggregator,
    earnings_for_minutes,
    entries_in_period,
)
from minijob_engines.carryover import (
    EarningsCarryoverLedger,
    LedgerTotals,
    build_ledger,
    ledger_totals,
)
from minijob_engines.limits import (
    LimitAdjustment,
    LimitSchedule,
    normalize_limit_chain,
)
from minijob_engines.periods import (
    MONTH_NAMES,
    BillingPeriodResolver,
    list_periods,
    period_containing,
    period_key_for_date,
    periods_between,
    resolve_period,
    validate_billing_config,
    yearly_periods,
)
from minijob_engines.tracer import traced_engine
from minijob_engines.warning import (
    WarningClassifier,
    WarningThresholds,
    usage_percent,
)

__all__ = [
    # Periods
    "MONTH_NAMES",
    "BillingPeriodResolver",
    "list_periods",
    "period_containing",
    "period_key_for_date",
    "periods_between",
    "resolve_period",
    "validate_billing_config",
    "yearly_periods",
    # Aggregation
    "TimeEntryAggregator",
    "earnings_for_minutes",
    "entries_in_period",
    # Limits
    "LimitAdjustment",
    "LimitSchedule",
    "normalize_limit_chain",
    # Carryover
    "EarningsCarryoverLedger",
    "LedgerTotals",
    "build_ledger",
    "ledger_totals",
    # Warning
    "WarningClassifier",
    "WarningThresholds",
    "usage_percent",
    # Tracing
    "traced_engine",
]
