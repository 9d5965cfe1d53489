"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from scoped_rag.retrieval.base import VectorStoreBase
from scoped_rag.retrieval.models import Chunk, ChunkMetadata


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class FakeVectorStore(VectorStoreBase):
    """In-memory fake with canned per-query results.

    ``responses`` maps a query string to what ``similarity_search`` returns;
    unknown queries get ``default``.  Queries listed in ``failing`` raise.
    """

    def __init__(
        self,
        responses: dict[str, list[Chunk]] | None = None,
        *,
        default: list[Chunk] | None = None,
        failing: set[str] | None = None,
        fail_add: bool = False,
    ) -> None:
        super().__init__("test-collection")
        self.responses = responses or {}
        self.default = default or []
        self.failing = failing or set()
        self.fail_add = fail_add
        self.queries: list[str] = []
        self.last_k: int | None = None
        self.added: list[Chunk] = []

    def add(self, chunks: list[Chunk]) -> list[str]:
        if self.fail_add:
            raise RuntimeError("index unavailable")
        self.added.extend(chunks)
        return [c.id for c in chunks]

    def similarity_search(self, query: str, *, k: int = 4) -> list[Chunk]:
        self.queries.append(query)
        self.last_k = k
        if query in self.failing:
            raise ConnectionError(f"search for {query!r} timed out")
        return list(self.responses.get(query, self.default))

    def health_check(self) -> bool:
        return True


def make_chunk(
    chunk_id: str,
    text: str = "",
    *,
    conversation_id: str | None = None,
    filename: str | None = None,
) -> Chunk:
    return Chunk(
        id=chunk_id,
        text=text or f"Text of {chunk_id}.",
        metadata=ChunkMetadata(conversation_id=conversation_id, original_filename=filename),
    )


def word_count(text: str) -> int:
    """Whitespace tokenizer, so chunking tests stay offline and exact."""
    return len(text.split())


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def byte_level_encoding(monkeypatch: pytest.MonkeyPatch):
    """Serve every tiktoken encoding name from a local byte-level table.

    ``<|endoftext|>`` is registered as a special token, like in the
    published encodings, but nothing is downloaded.
    """
    tiktoken = pytest.importorskip("tiktoken")
    encoding = tiktoken.Encoding(
        name="byte-level",
        pat_str=r"\S+|\s+",
        mergeable_ranks={bytes([i]): i for i in range(256)},
        special_tokens={"<|endoftext|>": 256},
    )
    monkeypatch.setattr(tiktoken, "get_encoding", lambda name: encoding)
    return encoding
