"""
TimeEntryService -- validated writes of worked shifts.

Responsibility:
    Record, update and delete time entries for one user and report the
    first billing period whose ledger the change invalidates.

Architecture position:
    Services -- imperative shell.  Validation happens in the ``TimeEntry``
    DTO and against the active policy before anything is persisted, so an
    invalid entry never reaches aggregation.

Invariants enforced:
    - A user must have a billing configuration before entries can be
      recorded (MissingBillingConfigError otherwise).
    - Worked minutes and break length respect both the built-in rules and
      the policy's (possibly stricter) ``time_entries`` rules.
    - Invalidation: a change in period P invalidates the ledger of P and
      every later period.  For an update that moves an entry, P is the
      earlier of the old and the new period.
    - Flush-only: never commits.

Failure modes:
    - ValidationError subclasses for malformed or too short entries.
    - MissingBillingConfigError when the user has no configuration.
    - TimeEntryNotFoundError for unknown IDs or another user's entry.
"""

from dataclasses import dataclass
from datetime import date, time
from uuid import UUID

from minijob_config import get_active_policy
from minijob_config.schema import MinijobPolicy
from minijob_engines.periods import period_key_for_date
from minijob_kernel.domain.clock import Clock
from minijob_kernel.domain.dtos import TimeEntry, UserBillingConfig
from minijob_kernel.domain.values import PeriodKey
from minijob_kernel.exceptions import (
    BelowMinimumDurationError,
    BreakOutOfRangeError,
    TimeEntryNotFoundError,
)
from minijob_kernel.logging_config import LogContext, get_logger
from minijob_kernel.models.time_entry import TimeEntryModel
from minijob_kernel.selectors.billing_setting_selector import BillingSettingSelector
from minijob_kernel.selectors.time_entry_selector import TimeEntrySelector, to_time_entry
from minijob_services.base import BaseService

logger = get_logger("services.time_entry")


@dataclass(frozen=True)
class TimeEntryChange:
    """Outcome of a write: the stored entry and the first stale period."""

    entry: TimeEntry
    invalidated_from: PeriodKey


class TimeEntryService(BaseService):
    """
    Write operations on time entries.

    Contract:
        Every method validates before touching the session and reports
        the first ``PeriodKey`` whose cached ledger must be recomputed.
    """

    def __init__(self, session, clock: Clock | None = None, policy: MinijobPolicy | None = None):
        super().__init__(session, clock)
        self._policy = policy or get_active_policy()
        self._settings = BillingSettingSelector(session)
        self._entries = TimeEntrySelector(session)

    def _validated(
        self,
        entry_date: date | str,
        start_time: time | str,
        end_time: time | str,
        break_minutes: int | str,
        description: str | None,
        entry_id: UUID | None = None,
    ) -> TimeEntry:
        entry = TimeEntry.from_raw(
            entry_date, start_time, end_time, break_minutes, description, entry_id
        )
        rules = self._policy.time_entries
        if entry.break_minutes > rules.maximum_break_minutes:
            raise BreakOutOfRangeError(entry.break_minutes, rules.maximum_break_minutes)
        if entry.worked_minutes < rules.minimum_work_minutes:
            raise BelowMinimumDurationError(entry.worked_minutes, rules.minimum_work_minutes)
        return entry

    def _owned_model(self, user_id: UUID, entry_id: UUID) -> TimeEntryModel:
        model = self._entries.get_model(entry_id)
        if model is None or model.user_id != user_id:
            raise TimeEntryNotFoundError(entry_id)
        return model

    def _key_for(self, config: UserBillingConfig, day: date) -> PeriodKey:
        return period_key_for_date(config.period_config, day)

    def record_entry(
        self,
        user_id: UUID,
        entry_date: date | str,
        start_time: time | str,
        end_time: time | str,
        break_minutes: int | str = 0,
        description: str | None = None,
    ) -> TimeEntryChange:
        """
        Validate and store a new entry.

        Raises:
            MissingBillingConfigError: if the user has no configuration.
            ValidationError: if the entry is malformed or too short.
        """
        with LogContext.bind(user_id=str(user_id)):
            config = self._settings.require(user_id)
            entry = self._validated(entry_date, start_time, end_time, break_minutes, description)

            model = TimeEntryModel(
                user_id=user_id,
                work_date=entry.entry_date,
                start_time=entry.start_time,
                end_time=entry.end_time,
                break_minutes=entry.break_minutes,
                description=entry.description,
            )
            self.session.add(model)
            self.session.flush()

            invalidated = self._key_for(config, entry.entry_date)
            logger.info(
                "time_entry_recorded",
                extra={
                    "entry_id": model.id,
                    "work_date": entry.entry_date,
                    "worked_minutes": entry.worked_minutes,
                    "invalidated_from": invalidated.code,
                },
            )
            return TimeEntryChange(to_time_entry(model), invalidated)

    def update_entry(
        self,
        user_id: UUID,
        entry_id: UUID,
        entry_date: date | str,
        start_time: time | str,
        end_time: time | str,
        break_minutes: int | str = 0,
        description: str | None = None,
    ) -> TimeEntryChange:
        """
        Replace the values of an existing entry.

        Raises:
            TimeEntryNotFoundError: if the entry does not exist for the user.
            ValidationError: if the new values are invalid.
        """
        with LogContext.bind(user_id=str(user_id)):
            config = self._settings.require(user_id)
            model = self._owned_model(user_id, entry_id)
            entry = self._validated(
                entry_date, start_time, end_time, break_minutes, description, entry_id
            )

            old_key = self._key_for(config, model.work_date)
            new_key = self._key_for(config, entry.entry_date)

            model.work_date = entry.entry_date
            model.start_time = entry.start_time
            model.end_time = entry.end_time
            model.break_minutes = entry.break_minutes
            model.description = entry.description
            self.session.flush()

            invalidated = min(old_key, new_key)
            logger.info(
                "time_entry_updated",
                extra={
                    "entry_id": entry_id,
                    "work_date": entry.entry_date,
                    "invalidated_from": invalidated.code,
                },
            )
            return TimeEntryChange(entry, invalidated)

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> PeriodKey:
        """
        Delete an entry and return the first invalidated period.

        Raises:
            TimeEntryNotFoundError: if the entry does not exist for the user.
        """
        with LogContext.bind(user_id=str(user_id)):
            config = self._settings.require(user_id)
            model = self._owned_model(user_id, entry_id)
            invalidated = self._key_for(config, model.work_date)

            self.session.delete(model)
            self.session.flush()

            logger.info(
                "time_entry_deleted",
                extra={"entry_id": entry_id, "invalidated_from": invalidated.code},
            )
            return invalidated
