"""Conversation-scoped retrieval over the vector index.

:class:`ConversationRetriever` is the **primary public interface** for
retrieval.  Every public text-returning method turns failures into a
descriptive sentence; nothing raised by the index escapes it.

Usage::

    from scoped_rag.retrieval.retriever import ConversationRetriever

    retriever = ConversationRetriever()
    print(retriever.search("What does the contract say about renewal?", "conv-1"))
    print(retriever.list_documents("conv-1"))
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from scoped_rag.config import RetrievalConfig, settings
from scoped_rag.errors import (
    IndexQueryError,
    InvalidQueryError,
    MissingConversationIdError,
    RetrievalError,
)
from scoped_rag.retrieval import formatting
from scoped_rag.retrieval.base import VectorStoreBase
from scoped_rag.retrieval.intent import classify_intent, wants_long_text
from scoped_rag.retrieval.models import Chunk, QueryIntent, RetrievalResult

logger = logging.getLogger(__name__)

QueryOutcome = list[Chunk] | IndexQueryError


def deduplicate(chunks: Sequence[Chunk]) -> list[Chunk]:
    """Drop repeated ids, keeping the first occurrence in input order.

    Chunks without an id cannot be matched and are always kept.
    """
    seen: set[str] = set()
    unique: list[Chunk] = []
    for chunk in chunks:
        if chunk.id is not None:
            if chunk.id in seen:
                continue
            seen.add(chunk.id)
        unique.append(chunk)
    return unique


def filter_by_conversation(chunks: Sequence[Chunk], conversation_id: str) -> list[Chunk]:
    """Keep chunks whose ``conversation_id`` equals *conversation_id* exactly."""
    return [c for c in chunks if c.metadata.conversation_id == conversation_id]


class ConversationRetriever:
    """Multi-query retrieval with dedup, conversation filtering and formatting.

    Parameters
    ----------
    store:
        A concrete vector-store backend.  When *None*, a default
        :class:`~scoped_rag.retrieval.chroma_store.ChromaVectorStore`
        is created from the global settings.
    config:
        Query sets, budgets and output limits.
    """

    def __init__(
        self,
        store: VectorStoreBase | None = None,
        *,
        config: RetrievalConfig | None = None,
    ) -> None:
        if store is None:
            from scoped_rag.retrieval.chroma_store import ChromaVectorStore

            store = ChromaVectorStore()
        self._store = store
        self.config = config or settings.retrieval_config()

    # -- public API -----------------------------------------------------------

    def retrieve(self, query: str | None, conversation_id: str | None = None) -> RetrievalResult:
        """Structured form of :meth:`search`; raises :class:`RetrievalError`.

        A blank *conversation_id* searches every conversation.  That is
        allowed here, unlike in :meth:`list_documents` and
        :meth:`get_document_contents`, and is logged as a warning.
        """
        if not query or not query.strip():
            raise InvalidQueryError("Search query is empty")

        intent = classify_intent(query, self.config.broad_keywords)
        if intent is QueryIntent.BROAD:
            logger.info("Broad content request detected, using comprehensive search")
            queries: Sequence[str] = self.config.broad_search_queries
        else:
            queries = (query,)

        chunks = deduplicate(self._gather(queries))
        logger.info("Found %d chunks before conversation filter", len(chunks))

        scope = conversation_id if conversation_id and conversation_id.strip() else None
        if scope:
            chunks = filter_by_conversation(chunks, scope)
        else:
            logger.warning("No conversation ID provided for document search, searching all documents")
        logger.info("Found %d chunks after conversation filter", len(chunks))

        return RetrievalResult(
            query=query,
            intent=intent,
            conversation_id=scope,
            chunks=chunks[: self.config.top_n],
        )

    def search(self, query: str | None, conversation_id: str | None = None) -> str:
        """Search documents and return a formatted answer blob."""
        logger.info("Search called: query=%r conversation_id=%r", query, conversation_id)
        try:
            result = self.retrieve(query, conversation_id)
        except InvalidQueryError:
            return formatting.NO_QUERY
        except RetrievalError as exc:
            logger.error("Error searching documents: %s", exc, exc_info=True)
            return formatting.format_error("searching documents", exc)

        if not result.chunks:
            return formatting.NOTHING_IN_CONVERSATION if result.is_scoped else formatting.NOTHING_FOUND

        long_text = wants_long_text(result.query, self.config.long_text_keywords)
        max_length = self.config.long_max_length if long_text else self.config.short_max_length
        for i, chunk in enumerate(result.chunks, 1):
            logger.info("Result %d: %d chars from file %r", i, len(chunk.text), chunk.display_name)
        return formatting.format_search(result.chunks, max_length, self.config.divider)

    def list_documents(self, conversation_id: str | None) -> str:
        """Numbered list of files uploaded in *conversation_id* plus a chunk count."""
        try:
            chunks = self._conversation_chunks(
                conversation_id,
                self.config.listing_queries,
                fallback=self.config.listing_fallback_query,
            )
        except MissingConversationIdError:
            return formatting.NO_CONVERSATION
        except RetrievalError as exc:
            logger.error("Error listing documents: %s", exc, exc_info=True)
            return formatting.format_error("listing documents", exc)

        if not chunks:
            return formatting.NO_DOCUMENTS_YET
        return formatting.format_listing(chunks)

    def get_document_contents(self, conversation_id: str | None) -> str:
        """Best-effort reconstruction of every file in *conversation_id*.

        Chunk texts are concatenated per file in retrieval order; this is
        an approximation of the original document, not a faithful copy.
        """
        try:
            chunks = self._conversation_chunks(conversation_id, self.config.contents_queries)
        except MissingConversationIdError:
            return formatting.NO_CONVERSATION
        except RetrievalError as exc:
            logger.error("Error getting document contents: %s", exc, exc_info=True)
            return formatting.format_error("retrieving document contents", exc)

        if not chunks:
            return formatting.NO_CONTENTS
        return formatting.format_contents(chunks, self.config.divider)

    # -- internals ------------------------------------------------------------

    def _conversation_chunks(
        self,
        conversation_id: str | None,
        queries: Sequence[str],
        *,
        fallback: str | None = None,
    ) -> list[Chunk]:
        if not conversation_id or not conversation_id.strip():
            raise MissingConversationIdError("conversation id is required")

        if fallback is None:
            chunks = self._gather(queries)
        else:
            chunks = self._gather_with_fallback(queries, fallback)

        chunks = filter_by_conversation(deduplicate(chunks), conversation_id)
        logger.info("Found %d chunks for conversation %s", len(chunks), conversation_id)
        return chunks

    def _gather(self, queries: Sequence[str]) -> list[Chunk]:
        """Concatenate results in query order; the first failure is raised."""
        merged: list[Chunk] = []
        for outcome in self._run(queries):
            if isinstance(outcome, IndexQueryError):
                raise outcome
            merged.extend(outcome)
        return merged

    def _gather_with_fallback(self, queries: Sequence[str], fallback: str) -> list[Chunk]:
        """Like :meth:`_gather` but tolerates failures; *fallback* only runs if all fail."""
        merged: list[Chunk] = []
        failures = 0
        for outcome in self._run(queries):
            if isinstance(outcome, IndexQueryError):
                failures += 1
                logger.warning("Query %r failed: %s", outcome.query, outcome)
                continue
            merged.extend(outcome)

        if queries and failures == len(queries):
            logger.warning("All listing queries failed, falling back to %r", fallback)
            return self._gather((fallback,))
        return merged

    def _run(self, queries: Sequence[str]) -> list[QueryOutcome]:
        """Issue every query; results come back in issue order either way."""
        if self.config.parallel_queries and len(queries) > 1:
            with ThreadPoolExecutor(max_workers=len(queries)) as pool:
                return list(pool.map(self._query, queries))
        return [self._query(q) for q in queries]

    def _query(self, query: str) -> QueryOutcome:
        try:
            return self._store.similarity_search(query, k=self.config.index_top_k)
        except Exception as exc:
            return IndexQueryError(query, exc)
