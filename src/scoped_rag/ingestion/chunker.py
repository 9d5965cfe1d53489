"""Token-bounded text chunking."""

from __future__ import annotations

import logging
from typing import Callable

from langchain_text_splitters import RecursiveCharacterTextSplitter

from scoped_rag.config import ChunkerConfig
from scoped_rag.retrieval.models import Chunk, ChunkMetadata, Fragment

logger = logging.getLogger(__name__)

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class TextChunker:
    """Split fragments into overlapping chunks measured in tokens.

    Splits fall on paragraph, line, sentence and word boundaries before
    resorting to mid-word cuts, and separators stay attached to the text.

    Parameters
    ----------
    config:
        Size, overlap and character bounds.
    token_counter:
        Length function in tokens.  When omitted the tiktoken encoding
        named in *config* is used.
    """

    def __init__(
        self,
        config: ChunkerConfig | None = None,
        *,
        token_counter: Callable[[str], int] | None = None,
    ) -> None:
        self.config = config or ChunkerConfig()
        if self.config.chunk_overlap >= self.config.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.config.chunk_overlap}) must be < chunk_size ({self.config.chunk_size})"
            )

        if token_counter is None:
            self._splitter = RecursiveCharacterTextSplitter.from_tiktoken_encoder(
                encoding_name=self.config.encoding_name,
                disallowed_special=(),
                chunk_size=self.config.chunk_size,
                chunk_overlap=self.config.chunk_overlap,
                separators=SEPARATORS,
                keep_separator=self.config.keep_separator,
            )
        else:
            self._splitter = RecursiveCharacterTextSplitter(
                chunk_size=self.config.chunk_size,
                chunk_overlap=self.config.chunk_overlap,
                length_function=token_counter,
                separators=SEPARATORS,
                keep_separator=self.config.keep_separator,
            )

    def split_text(self, text: str) -> list[str]:
        """Split one text and apply the character bounds.

        Empty pieces are dropped.  Pieces shorter than ``min_chunk_chars``
        are dropped too, unless the text produced only that one piece.
        Pieces longer than ``max_chunk_chars`` are cut into windows of at
        most that length, breaking on whitespace where possible; consecutive
        windows share ``chunk_overlap`` characters.
        """
        pieces = [p for p in self._splitter.split_text(text) if p.strip()]
        pieces = [window for p in pieces for window in self._cap(p)]
        if len(pieces) <= 1:
            return pieces
        return [p for p in pieces if len(p.strip()) >= self.config.min_chunk_chars]

    def chunk(self, fragments: list[Fragment]) -> list[Chunk]:
        """Chunk *fragments*, preserving fragment order and in-fragment order.

        Chunks inherit their fragment's source metadata.  They carry no id
        yet; the tagger assigns one.
        """
        chunks: list[Chunk] = []
        dropped = 0
        for fragment in fragments:
            pieces = self.split_text(fragment.text)
            if not pieces:
                dropped += 1
                continue
            for index, piece in enumerate(pieces):
                metadata = ChunkMetadata.from_store(fragment.source_metadata)
                metadata.extra["chunk_index"] = index
                chunks.append(Chunk(text=piece, metadata=metadata))

        logger.info("Split %d fragments into %d chunks", len(fragments), len(chunks))
        if dropped:
            logger.info("Dropped %d fragments that produced no usable chunks", dropped)
        return chunks

    def _cap(self, piece: str) -> list[str]:
        limit = self.config.max_chunk_chars
        if len(piece) <= limit:
            return [piece]
        overlap = min(self.config.chunk_overlap, limit // 2)
        windows: list[str] = []
        start = 0
        while True:
            end = min(start + limit, len(piece))
            if end < len(piece):
                cut = piece.rfind(" ", start + limit // 2, end)
                if cut != -1:
                    end = cut + 1
            windows.append(piece[start:end])
            if end >= len(piece):
                return windows
            start = end - overlap
            space = piece.find(" ", start, end)
            if space != -1 and space + 1 < end:
                start = space + 1
