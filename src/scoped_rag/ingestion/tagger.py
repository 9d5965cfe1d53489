"""Provenance and upload metadata for chunks."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from scoped_rag.ingestion.sources import UNKNOWN_URI, SourceFile
from scoped_rag.retrieval.models import Chunk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Provenance:
    """Where a batch of chunks came from."""

    file_name: str
    source_uri: str = UNKNOWN_URI
    processor: str | None = None

    @classmethod
    def for_source(cls, source: SourceFile, processor: str | None = None) -> Provenance:
        return cls(file_name=source.filename, source_uri=source.uri or UNKNOWN_URI, processor=processor)


@dataclass(frozen=True)
class UploadStamp:
    """Per-upload fields, always written fresh."""

    conversation_id: str
    original_filename: str
    temp_filename: str
    file_type: str | None
    upload_time: datetime


class MetadataTagger:
    """Fill in chunk identity and provenance.

    Parameters
    ----------
    id_factory:
        Returns a new, globally unique chunk id.
    clock:
        Returns the upload timestamp.
    """

    def __init__(
        self,
        *,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._new_id = id_factory
        self._clock = clock

    def tag(self, chunks: list[Chunk], provenance: Provenance) -> list[Chunk]:
        """Insert-if-absent: only empty fields are filled, ids only when missing."""
        for chunk in chunks:
            meta = chunk.metadata
            if meta.file_name is None:
                meta.file_name = provenance.file_name
            if meta.source_uri is None:
                meta.source_uri = provenance.source_uri or UNKNOWN_URI
            if meta.processor is None and provenance.processor:
                meta.processor = provenance.processor
            if chunk.id is None:
                chunk.id = self._new_id()
        return chunks

    def stamp(self, conversation_id: str, original_filename: str, temp_filename: str, file_type: str | None) -> UploadStamp:
        return UploadStamp(
            conversation_id=conversation_id,
            original_filename=original_filename,
            temp_filename=temp_filename,
            file_type=file_type,
            upload_time=self._clock(),
        )

    def tag_upload(self, chunks: list[Chunk], stamp: UploadStamp) -> list[Chunk]:
        """Overwrite the five upload fields on every chunk."""
        for chunk in chunks:
            meta = chunk.metadata
            meta.conversation_id = stamp.conversation_id
            meta.upload_time = stamp.upload_time
            meta.file_type = stamp.file_type
            meta.original_filename = stamp.original_filename
            meta.temp_filename = stamp.temp_filename
        logger.info("Stamped %d chunks for conversation %s", len(chunks), stamp.conversation_id)
        return chunks
