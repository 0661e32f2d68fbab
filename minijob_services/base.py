"""
BaseService -- abstract base for all minijob services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service.  Services receive a SQLAlchemy ``Session`` and use
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Services -- imperative shell around the pure engines.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or roll back themselves.  The caller
      (``session_scope()`` or a test harness) owns commit/rollback, so a
      write-then-recompute cycle for one user is a single transaction.
"""

from abc import ABC

from sqlalchemy.orm import Session

from minijob_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for all services.

    Contract:
        Accepts a ``Session`` from the caller and an optional ``Clock``.
        The clock is the only source of "today" anywhere in the package.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self._clock = clock or SystemClock()
