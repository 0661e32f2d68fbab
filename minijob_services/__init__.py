"""
minijob_services -- imperative shell around the pure engines.

Services accept a SQLAlchemy ``Session`` and an optional ``Clock``; they
flush but never commit.  Wrap calls in ``minijob_kernel.db.engine.session_scope``
so one write-then-recompute cycle per user is a single transaction.
"""

from minijob_services.billing_config_service import BillingConfigService
from minijob_services.ledger_service import LedgerService
from minijob_services.limit_service import LimitService
from minijob_services.time_entry_service import TimeEntryChange, TimeEntryService

__all__ = [
    "BillingConfigService",
    "LedgerService",
    "LimitService",
    "TimeEntryChange",
    "TimeEntryService",
]
