"""
Retrieval — conversation-scoped search over the vector index.

This module wraps the vector store behind a clean interface so that
callers never need to know which DB is backing retrieval.

Public surface
--------------
- :class:`ConversationRetriever` — search, listing and content reassembly.
- :class:`VectorStoreBase` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`Chunk`, :class:`ChunkMetadata`, :class:`RetrievalResult` — data models.
- :func:`classify_intent` — broad / specific query classification.
"""

from scoped_rag.retrieval.base import VectorStoreBase
from scoped_rag.retrieval.intent import classify_intent
from scoped_rag.retrieval.models import Chunk, ChunkMetadata, Fragment, QueryIntent, RetrievalResult
from scoped_rag.retrieval.retriever import ConversationRetriever

__all__ = [
    "ChromaVectorStore",
    "Chunk",
    "ChunkMetadata",
    "ConversationRetriever",
    "Fragment",
    "QueryIntent",
    "RetrievalResult",
    "VectorStoreBase",
    "classify_intent",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from scoped_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
