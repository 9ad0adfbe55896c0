"""In-memory transactional document store.

Documents are plain dicts addressed by slash-separated paths, e.g.
``inventory/abc`` or ``inventory/abc/stockLots/xyz``; a document's
collection is its path minus the last segment.

Transactions are optimistic: reads record the version of every document
they return (version 0 for a missing document), writes are buffered, and
``commit()`` re-checks all recorded versions under the store lock before
applying the writes.  Any mismatch raises ConcurrencyConflictError and
nothing is written.  As in hosted document databases, a transaction must
perform all its reads before its first write.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable

from shopledger.domain.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Placeholder resolved to the commit time; survives copying as itself."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __copy__(self) -> _ServerTimestamp:
        return self

    def __deepcopy__(self, memo: dict) -> _ServerTimestamp:
        return self


SERVER_TIMESTAMP = _ServerTimestamp()

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
}


def collection_of(path: str) -> str:
    return path.rsplit("/", 1)[0]


def doc_id_of(path: str) -> str:
    return path.rsplit("/", 1)[1]


class StoreTransaction:
    """A single optimistic transaction.  Use once."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self._reads: dict[str, int] = {}
        self._writes: dict[str, dict | None] = {}
        self._done = False

    # --- Reads ----------------------------------------------------------------

    def get(self, path: str) -> dict | None:
        self._assert_can_read()
        version, data = self._store._read(path)
        self._record(path, version)
        return data

    def query(
        self,
        collection: str,
        where: Iterable[tuple[str, str, Any]] = (),
        order_by: Iterable[str] = (),
    ) -> list[tuple[str, dict]]:
        """Return ``(doc_id, data)`` pairs of matching documents.

        Results are sorted by the ``order_by`` fields ascending, then by
        document id.
        """
        self._assert_can_read()
        results = self._store._query(collection, list(where), list(order_by))
        for path, version, _ in results:
            self._record(path, version)
        return [(doc_id_of(path), data) for path, _, data in results]

    # --- Writes ---------------------------------------------------------------

    def set(self, path: str, data: dict) -> None:
        self._assert_open()
        self._writes[path] = copy.deepcopy(data)

    def delete(self, path: str) -> None:
        self._assert_open()
        self._writes[path] = None

    def commit(self) -> None:
        self._assert_open()
        self._done = True
        self._store._commit(self._reads, self._writes)

    # --- Internal helpers -----------------------------------------------------

    def _record(self, path: str, version: int) -> None:
        seen = self._reads.setdefault(path, version)
        if seen != version:
            raise ConcurrencyConflictError(f"Document {path} changed during the transaction")

    def _assert_open(self) -> None:
        if self._done:
            raise RuntimeError("Transaction already committed")

    def _assert_can_read(self) -> None:
        self._assert_open()
        if self._writes:
            raise RuntimeError(
                "Transactions require all reads to be executed before all writes"
            )


class InMemoryDocumentStore:

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._docs: dict[str, tuple[int, dict]] = {}
        self._lock = threading.RLock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_timestamp: datetime | None = None
        # Versions come from one commit counter, so a deleted and
        # re-created document never reuses a version.
        self._sequence = 0
        self._listeners: list[Callable[[set], None]] = []

    # --- Public API -----------------------------------------------------------

    def transaction(self) -> StoreTransaction:
        return StoreTransaction(self)

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex[:20]

    def subscribe(self, listener: Callable[[set], None]) -> None:
        """Call ``listener(changed_paths)`` after every successful commit."""
        self._listeners.append(listener)

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._docs)

    def delete_all(self, chunk_size: int = 500) -> int:
        """Delete every document in commits of at most ``chunk_size``.

        Each chunk is its own transaction; a failure part way leaves the
        earlier chunks deleted.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        paths = self.paths()
        for start in range(0, len(paths), chunk_size):
            tx = self.transaction()
            for path in paths[start:start + chunk_size]:
                tx.delete(path)
            tx.commit()
            logger.debug("Deleted chunk of %d documents", len(paths[start:start + chunk_size]))
        return len(paths)

    # --- Transaction plumbing -------------------------------------------------

    def _read(self, path: str) -> tuple[int, dict | None]:
        with self._lock:
            entry = self._docs.get(path)
            if entry is None:
                return 0, None
            return entry[0], copy.deepcopy(entry[1])

    def _query(
        self,
        collection: str,
        where: list[tuple[str, str, Any]],
        order_by: list[str],
    ) -> list[tuple[str, int, dict]]:
        with self._lock:
            matches = []
            for path, (version, data) in self._docs.items():
                if collection_of(path) != collection:
                    continue
                if all(self._matches(data, clause) for clause in where):
                    matches.append((path, version, copy.deepcopy(data)))
        matches.sort(key=lambda m: (tuple(m[2].get(f) for f in order_by), doc_id_of(m[0])))
        return matches

    @staticmethod
    def _matches(data: dict, clause: tuple[str, str, Any]) -> bool:
        field, op, value = clause
        if field not in data or data[field] is None:
            return False
        return _OPERATORS[op](data[field], value)

    def _commit(self, reads: dict[str, int], writes: dict[str, dict | None]) -> None:
        with self._lock:
            for path, version in reads.items():
                current = self._docs.get(path)
                current_version = current[0] if current else 0
                if current_version != version:
                    raise ConcurrencyConflictError(
                        f"Document {path} was modified by another transaction"
                    )
            if not writes:
                return
            timestamp = self._next_timestamp()
            self._sequence += 1
            for path, data in writes.items():
                if data is None:
                    self._docs.pop(path, None)
                    continue
                resolved = {
                    key: timestamp if isinstance(value, _ServerTimestamp) else value
                    for key, value in data.items()
                }
                self._docs[path] = (self._sequence, resolved)
            self._after_commit()
        changed = set(writes)
        for listener in list(self._listeners):
            listener(changed)

    def _after_commit(self) -> None:
        """Hook for durable subclasses; runs under the store lock."""

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now
