"""
LedgerService -- builds the carryover ledger for one user.

Responsibility:
    Load a user's billing configuration, time entries and the limit
    history through selectors, then run the pure engines in order:
    resolve periods, aggregate each period, fold the carry forward.

Architecture position:
    Services -- imperative shell.  The only place that reads "today"
    (from the injected clock) and passes it to the resolver for the
    ``is_current`` flag.

Invariants enforced:
    - Never computes one period in isolation: every ledger starts at the
      period of the user's first entry (the zero-carry point) and folds
      forward to the requested period.
    - Limits come from the stored history; when the table is empty the
      policy's limit history is used.
    - The ledger is recomputed on every call; nothing is cached.

Failure modes:
    - MissingBillingConfigError when the user has no configuration.
    - NoCurrentSettingError when a folded period has no limit in force.
"""

from datetime import date
from uuid import UUID

from minijob_config import get_active_policy
from minijob_config.bridges import limit_schedule_from_policy, warning_classifier_from_policy
from minijob_config.schema import MinijobPolicy
from minijob_engines.aggregation import TimeEntryAggregator
from minijob_engines.carryover import EarningsCarryoverLedger
from minijob_engines.limits import LimitSchedule
from minijob_engines.periods import BillingPeriodResolver
from minijob_kernel.domain.clock import Clock
from minijob_kernel.domain.dtos import BillingPeriod, LedgerEntry
from minijob_kernel.domain.values import PeriodKey
from minijob_kernel.logging_config import LogContext, get_logger
from minijob_kernel.selectors.billing_setting_selector import BillingSettingSelector
from minijob_kernel.selectors.limit_selector import LimitSelector
from minijob_kernel.selectors.time_entry_selector import TimeEntrySelector
from minijob_services.base import BaseService

logger = get_logger("services.ledger")


class LedgerService(BaseService):
    """
    Read-side service producing ``LedgerEntry`` results.

    Contract:
        Pure reads; calling any method twice with unchanged data returns
        equal results.
    """

    def __init__(self, session, clock: Clock | None = None, policy: MinijobPolicy | None = None):
        super().__init__(session, clock)
        self._policy = policy or get_active_policy()
        self._settings = BillingSettingSelector(session)
        self._entries = TimeEntrySelector(session)
        self._limits = LimitSelector(session)
        self._aggregator = TimeEntryAggregator()
        self._ledger = EarningsCarryoverLedger(warning_classifier_from_policy(self._policy))

    def limit_schedule(self) -> LimitSchedule:
        stored = self._limits.all_limits()
        if stored:
            return LimitSchedule(stored)
        return limit_schedule_from_policy(self._policy)

    def resolver(self, user_id: UUID) -> BillingPeriodResolver:
        return BillingPeriodResolver(self._settings.require(user_id).period_config)

    def ledger(
        self,
        user_id: UUID,
        through: PeriodKey,
        since: PeriodKey | None = None,
    ) -> tuple[LedgerEntry, ...]:
        """
        Ledger from the user's zero-carry point through ``through``.

        The fold starts at the period of the user's first entry, or at
        ``since`` when that is earlier.  Returns a single entry for
        ``through`` when the user has no entries at or before it.
        """
        with LogContext.bind(user_id=str(user_id), period_code=through.code):
            config = self._settings.require(user_id)
            resolver = BillingPeriodResolver(config.period_config)
            today = self._clock.today()

            first_date = self._entries.first_entry_date(user_id)
            first_key = through
            if first_date is not None:
                first_key = min(resolver.key_for(first_date), through)
            if since is not None:
                first_key = min(first_key, since)

            periods = resolver.between(first_key, through, today)
            entries = self._entries.entries_between(
                user_id, periods[0].start_date, periods[-1].end_date
            )
            earnings = self._aggregator.aggregate_many(entries, periods, config.hourly_rate)
            ledger = self._ledger.build_ledger(earnings, self.limit_schedule())

            logger.info(
                "ledger_computed",
                extra={
                    "from_period": first_key.code,
                    "periods": len(ledger),
                    "entries": len(entries),
                },
            )
            return ledger

    def period_summary(self, user_id: UUID, year: int, month: int) -> LedgerEntry:
        """Authoritative result for the period keyed (``year``, ``month``)."""
        return self.ledger(user_id, PeriodKey(year, month))[-1]

    def current_summary(self, user_id: UUID) -> LedgerEntry:
        """Result for the period keyed for today's date."""
        key = self.resolver(user_id).key_for(self._clock.today())
        return self.ledger(user_id, key)[-1]

    def yearly_summary(self, user_id: UUID, year: int) -> tuple[LedgerEntry, ...]:
        """The twelve ledger entries keyed January through December of ``year``."""
        ledger = self.ledger(user_id, PeriodKey(year, 12), since=PeriodKey(year, 1))
        return tuple(entry for entry in ledger if entry.period.key.year == year)

    def billing_periods(
        self,
        user_id: UUID,
        count: int = 12,
        forward: int = 3,
        reference_date: date | None = None,
    ) -> tuple[BillingPeriod, ...]:
        """
        Periods for a selection list, newest first, with today flagged current.

        ``count`` periods up to and including the reference period, plus
        ``forward`` periods after it.
        """
        today = self._clock.today()
        return self.resolver(user_id).list_periods(
            reference_date or today, count, forward, today=today
        )
