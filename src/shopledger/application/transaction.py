"""Transaction Coordinator: the one place ledger work is retried.

A unit of work is a callable taking a LedgerSession.  It reads what it
needs, stages its writes, and returns a result; the coordinator commits.
If the commit detects that another writer changed something this unit
read, the whole unit runs again on fresh data.  Domain errors abort the
attempt without writing anything and are never retried.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from shopledger.domain.exceptions import ConcurrencyConflictError
from shopledger.domain.repository.ledger_repository import (
    LedgerRepository,
    LedgerSession,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5


class TransactionCoordinator:

    def __init__(
        self,
        repository: LedgerRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._repository = repository
        self._max_attempts = max_attempts

    @property
    def repository(self) -> LedgerRepository:
        return self._repository

    def run(self, work: Callable[[LedgerSession], T], description: str) -> T:
        """Run ``work`` in a fresh session and commit it atomically.

        Raises ConcurrencyConflictError once ``max_attempts`` attempts
        have all lost a race.
        """
        last_error: ConcurrencyConflictError | None = None
        for attempt in range(1, self._max_attempts + 1):
            session = self._repository.begin()
            try:
                result = work(session)
                session.commit()
            except ConcurrencyConflictError as exc:
                last_error = exc
                logger.warning(
                    "Conflict on %s (attempt %d/%d): %s",
                    description, attempt, self._max_attempts, exc,
                )
                continue
            return result

        raise ConcurrencyConflictError(
            f"Gave up on {description} after {self._max_attempts} attempts: "
            f"the data kept changing underneath it"
        ) from last_error

    def read(self, work: Callable[[LedgerSession], T]) -> T:
        """Run a read-only unit of work; nothing is committed."""
        return work(self._repository.begin())
