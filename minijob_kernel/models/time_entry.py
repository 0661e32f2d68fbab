"""
Module: minijob_kernel.models.time_entry
Responsibility: ORM persistence for worked shifts.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Rows are only written by TimeEntryService after the values passed
      ``TimeEntry`` validation, so every stored shift has at least the
      minimum worked minutes.
"""

from datetime import date, time
from uuid import UUID

from sqlalchemy import Date, Index, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from minijob_kernel.db.base import TrackedBase, UUIDString


class TimeEntryModel(TrackedBase):
    """One worked shift of one employee."""

    __tablename__ = "time_entries"

    __table_args__ = (
        Index("idx_time_entry_user_date", "user_id", "work_date"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TimeEntryModel {self.work_date} {self.start_time}-{self.end_time} "
            f"break={self.break_minutes}>"
        )
