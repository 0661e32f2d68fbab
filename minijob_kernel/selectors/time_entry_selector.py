"""
Module: minijob_kernel.selectors.time_entry_selector
Responsibility: Read worked shifts of one user as ``TimeEntry`` DTOs.

Invariants enforced:
    - Results are ordered by (work_date, start_time) so downstream folds see
      a deterministic order.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import func, select

from minijob_kernel.domain.dtos import TimeEntry
from minijob_kernel.models.time_entry import TimeEntryModel
from minijob_kernel.selectors.base import BaseSelector


def to_time_entry(row: TimeEntryModel) -> TimeEntry:
    """Convert an ORM row into a validated DTO."""
    return TimeEntry(
        entry_date=row.work_date,
        start_time=row.start_time,
        end_time=row.end_time,
        break_minutes=row.break_minutes,
        description=row.description,
        entry_id=row.id,
    )


class TimeEntrySelector(BaseSelector):
    """Time entry queries."""

    def get_model(self, entry_id: UUID) -> TimeEntryModel | None:
        return self.session.get(TimeEntryModel, entry_id)

    def entries_between(self, user_id: UUID, start: date, end: date) -> tuple[TimeEntry, ...]:
        """Entries of ``user_id`` with ``start <= work_date <= end``."""
        rows = self.session.execute(
            select(TimeEntryModel)
            .where(
                TimeEntryModel.user_id == user_id,
                TimeEntryModel.work_date >= start,
                TimeEntryModel.work_date <= end,
            )
            .order_by(TimeEntryModel.work_date, TimeEntryModel.start_time)
        ).scalars()
        return tuple(to_time_entry(row) for row in rows)

    def first_entry_date(self, user_id: UUID) -> date | None:
        return self.session.execute(
            select(func.min(TimeEntryModel.work_date)).where(TimeEntryModel.user_id == user_id)
        ).scalar_one_or_none()

    def count(self, user_id: UUID) -> int:
        return self.session.execute(
            select(func.count(TimeEntryModel.id)).where(TimeEntryModel.user_id == user_id)
        ).scalar_one()
