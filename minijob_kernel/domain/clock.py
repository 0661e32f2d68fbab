"""
Clock -- injectable source of "today".

Responsibility:
    Services never call ``date.today()`` directly; they ask the clock they
    were constructed with.  The only use of the current date in the package
    is choosing which billing period is current (the ``is_current`` flag and
    ``current_summary``).  The ledger fold itself never reads time.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the one place that reads the host's
    time.

Failure modes:
    - None.  ``DeterministicClock`` always returns its configured instant.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone, tzinfo


class Clock(ABC):
    """
    Contract:
        Injected into services through their constructor.  Engines receive
        plain ``date`` values instead.

    Guarantees:
        - ``now()`` is timezone-aware.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """
    Host time in ``tz``, UTC by default.

    The current period flips at midnight of this zone, so a host serving
    users in Germany passes its local zone, e.g.
    ``SystemClock(ZoneInfo("Europe/Berlin"))``.
    """

    def __init__(self, tz: tzinfo = timezone.utc):
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class DeterministicClock(Clock):
    """
    Clock that stays where it is put.

    Used by tests and by batch recomputations that must evaluate "current
    period" as of a fixed date.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._instant = fixed_time or datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    @classmethod
    def on(cls, day: date) -> "DeterministicClock":
        """Clock fixed at noon UTC of ``day``, far from any date boundary."""
        return cls(datetime.combine(day, time(12), tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._instant

    def set_time(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, seconds: int = 1) -> None:
        self._instant += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        """Move forward whole days, e.g. into the next billing period."""
        self._instant += timedelta(days=days)
