"""Batch writes into the vector index."""

from __future__ import annotations

import logging

from scoped_rag.errors import StoreWriteError
from scoped_rag.retrieval.base import VectorStoreBase
from scoped_rag.retrieval.models import Chunk

logger = logging.getLogger(__name__)

# Log every id for small batches; for larger ones stop after the first 20.
_ID_LOG_LIMIT = 20
_ID_LOG_FULL_BELOW = 25


class StoreWriter:
    """Submit chunks to a :class:`VectorStoreBase` as one batch."""

    def __init__(self, store: VectorStoreBase) -> None:
        self._store = store

    def write(self, chunks: list[Chunk]) -> int:
        """Write *chunks* and return how many were written.

        Raises
        ------
        StoreWriteError
            The store raised; nothing about partial success is reported.
        """
        if not chunks:
            logger.warning("No document chunks to add to the vector store")
            return 0

        logger.info(
            "Adding %d document chunks to vector store: %s",
            len(chunks),
            type(self._store).__name__,
        )
        try:
            self._store.add(chunks)
        except Exception as exc:
            raise StoreWriteError(str(exc) or type(exc).__name__) from exc
        logger.info("Successfully added %d document chunks to vector store", len(chunks))

        self._log_ids(chunks)
        return len(chunks)

    @staticmethod
    def _log_ids(chunks: list[Chunk]) -> None:
        logger.info(" --- Document IDs added to vector store ---")
        for count, chunk in enumerate(chunks, 1):
            logger.info("%s (source: %s)", chunk.id, chunk.metadata.file_name or "unknown")
            if count >= _ID_LOG_LIMIT and len(chunks) > _ID_LOG_FULL_BELOW:
                logger.info("... and %d more document IDs", len(chunks) - count)
                break
        logger.info(" --- End of document IDs ---")
