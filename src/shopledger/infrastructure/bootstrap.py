"""Composition root - wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Settings come from the environment when the coordinator is built:

- ``SHOPLEDGER_DATA_DIR``: directory holding ``ledger.json``
- ``SHOPLEDGER_MAX_ATTEMPTS``: transaction retry budget
"""

from __future__ import annotations

import os
from pathlib import Path

from shopledger.application.transaction import (
    DEFAULT_MAX_ATTEMPTS,
    TransactionCoordinator,
)
from shopledger.infrastructure.persistence.document_ledger import (
    DocumentLedgerRepository,
)
from shopledger.infrastructure.persistence.json_store import JsonDocumentStore

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    configured = os.environ.get("SHOPLEDGER_DATA_DIR")
    return Path(configured) if configured else _DEFAULT_DATA_DIR


def max_attempts() -> int:
    raw = os.environ.get("SHOPLEDGER_MAX_ATTEMPTS")
    if not raw:
        return DEFAULT_MAX_ATTEMPTS
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"SHOPLEDGER_MAX_ATTEMPTS must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError("SHOPLEDGER_MAX_ATTEMPTS must be at least 1")
    return value


def ledger_repository() -> DocumentLedgerRepository:
    return DocumentLedgerRepository(JsonDocumentStore(data_dir() / "ledger.json"))


def coordinator() -> TransactionCoordinator:
    return TransactionCoordinator(ledger_repository(), max_attempts=max_attempts())
