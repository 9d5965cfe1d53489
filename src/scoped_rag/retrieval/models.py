"""Domain models for fragments, stored chunks, and retrieval results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Keys that map onto typed fields of ChunkMetadata. Everything else a store
# hands back ends up in ``extra``.
_TYPED_KEYS = (
    "conversation_id",
    "upload_time",
    "file_type",
    "original_filename",
    "temp_filename",
    "source_uri",
    "processor",
    "file_name",
)


class Fragment(BaseModel):
    """A unit of extracted text, before chunking.

    Attributes
    ----------
    text:
        Raw text as produced by an extractor.
    source_metadata:
        Whatever the extractor reported about where the text came from
        (page number, loader-specific source path, …).
    """

    text: str
    source_metadata: dict[str, Any] = Field(default_factory=dict)


class ChunkMetadata(BaseModel):
    """Provenance of a stored chunk.

    The named fields are the ones retrieval relies on; ``extra`` carries
    extractor-specific, non-essential keys.  ``conversation_id`` is ``None``
    for bulk-loaded documents.
    """

    conversation_id: str | None = None
    upload_time: datetime | None = None
    file_type: str | None = None
    original_filename: str | None = None
    temp_filename: str | None = None
    source_uri: str | None = None
    processor: str | None = None
    file_name: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    def to_store(self) -> dict[str, str | int | float | bool]:
        """Flatten into the scalar-only map vector stores accept.

        ``None`` values are omitted; non-scalar extras are stringified.
        """
        flat: dict[str, str | int | float | bool] = {}
        for key, value in self.extra.items():
            if value is None:
                continue
            flat[key] = value if isinstance(value, (str, int, float, bool)) else str(value)
        for key in _TYPED_KEYS:
            value = getattr(self, key)
            if value is None:
                continue
            flat[key] = value.isoformat() if isinstance(value, datetime) else value
        return flat

    @classmethod
    def from_store(cls, raw: dict[str, Any] | None) -> ChunkMetadata:
        raw = dict(raw or {})
        typed = {key: raw.pop(key) for key in _TYPED_KEYS if key in raw}
        return cls(**typed, extra=raw)


class Chunk(BaseModel):
    """The unit persisted in and retrieved from the vector index.

    ``id`` stays ``None`` until the tagger assigns one and is never changed
    afterwards.
    """

    id: str | None = None
    text: str
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)

    @property
    def display_name(self) -> str:
        return self.metadata.original_filename or "Unknown file"


class QueryIntent(str, Enum):
    """How a search query is interpreted."""

    BROAD = "broad"
    SPECIFIC = "specific"


class RetrievalResult(BaseModel):
    """Deduplicated, conversation-filtered chunks for one retrieval call.

    Never persisted; rebuilt on every call.
    """

    query: str
    intent: QueryIntent
    conversation_id: str | None = None
    chunks: list[Chunk] = Field(default_factory=list)

    @property
    def is_scoped(self) -> bool:
        return bool(self.conversation_id and self.conversation_id.strip())
