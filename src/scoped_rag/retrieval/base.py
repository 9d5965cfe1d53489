"""Abstract base class for vector-store backends.

The ingestion and retrieval layers only talk to :class:`VectorStoreBase`.
Adding a backend means implementing ``add``, ``similarity_search`` and
``health_check``; ranking is entirely the backend's business.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scoped_rag.retrieval.models import Chunk


class VectorStoreBase(ABC):
    """Append-only, text-queried vector index.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    @abstractmethod
    def add(self, chunks: list[Chunk]) -> list[str]:
        """Persist *chunks* (which must already carry ids) and return the ids written."""
        ...

    @abstractmethod
    def similarity_search(self, query: str, *, k: int = 4) -> list[Chunk]:
        """Return up to *k* chunks related to *query*, best match first.

        May return an empty list.  Implementations raise on transport or
        backend failure; callers decide how to report it.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
