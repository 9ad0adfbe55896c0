"""JSON-file-backed document store.

Same transaction semantics as InMemoryDocumentStore; after each commit
the whole document map is written to a single JSON file.  Timestamps
are stored as ``{"$timestamp": "<iso>"}`` so they load back as datetimes
and keep their FIFO ordering.

Several processes may share one file.  Every transaction starts from
the file as it is on disk, and commits hold an exclusive lock on
``<file>.lock`` while they reload the file, validate the recorded
versions against it and write the result back.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from filelock import FileLock

from shopledger.infrastructure.persistence.memory_store import (
    InMemoryDocumentStore,
    StoreTransaction,
)

_TIMESTAMP_TAG = "$timestamp"


class JsonDocumentStore(InMemoryDocumentStore):

    def __init__(
        self, file_path: Path, clock: Callable[[], datetime] | None = None
    ) -> None:
        super().__init__(clock=clock)
        self._file_path = file_path
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(str(file_path) + ".lock")
        with self._file_lock:
            self._ensure_file()
            self._load()

    def transaction(self) -> StoreTransaction:
        self._refresh()
        return super().transaction()

    def paths(self) -> list[str]:
        self._refresh()
        return super().paths()

    # --- Persistence hooks ----------------------------------------------------

    def _commit(self, reads: dict[str, int], writes: dict[str, dict | None]) -> None:
        # Validate against the file, not against this process's snapshot.
        with self._file_lock, self._lock:
            self._load()
            super()._commit(reads, writes)

    def _after_commit(self) -> None:
        raw = {
            "sequence": self._sequence,
            "last_timestamp": self._last_timestamp,
            "documents": {
                path: {"version": version, "data": data}
                for path, (version, data) in sorted(self._docs.items())
            },
        }
        tmp_path = self._file_path.with_suffix(".tmp")
        tmp_path.write_text(
            json.dumps(raw, indent=2, default=self._encode) + "\n", encoding="utf-8"
        )
        tmp_path.replace(self._file_path)

    # --- File helpers ---------------------------------------------------------

    def _refresh(self) -> None:
        with self._file_lock, self._lock:
            self._load()

    def _load(self) -> None:
        raw = json.loads(
            self._file_path.read_text(encoding="utf-8"), object_hook=self._decode
        )
        self._sequence = raw.get("sequence", 0)
        last_timestamp = raw.get("last_timestamp")
        if self._last_timestamp is None or (
            last_timestamp is not None and last_timestamp > self._last_timestamp
        ):
            self._last_timestamp = last_timestamp
        self._docs = {
            path: (entry["version"], entry["data"])
            for path, entry in raw.get("documents", {}).items()
        }

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.write_text('{"documents": {}}', encoding="utf-8")

    @staticmethod
    def _encode(value: Any) -> Any:
        if isinstance(value, datetime):
            return {_TIMESTAMP_TAG: value.isoformat()}
        raise TypeError(f"Cannot store {type(value).__name__} in a document")

    @staticmethod
    def _decode(obj: dict) -> Any:
        if set(obj) == {_TIMESTAMP_TAG}:
            return datetime.fromisoformat(obj[_TIMESTAMP_TAG])
        return obj
