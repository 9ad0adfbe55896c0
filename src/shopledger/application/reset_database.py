"""Application service: Reset Database (administrative).

Deletes every document, lot sub-collections included, in chunks that
respect the store's batch-size limit.  Chunks are committed one by one,
so an interrupted reset leaves a partially emptied store.  Never used by
the ledger operations themselves.
"""

from __future__ import annotations

import logging

from shopledger.domain.repository.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500


class ResetDatabaseHandler:

    def __init__(self, repository: LedgerRepository) -> None:
        self._repository = repository

    def handle(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        deleted = self._repository.purge(chunk_size)
        logger.warning("Reset database: deleted %d documents", deleted)
        return deleted
