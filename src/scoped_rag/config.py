"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

DEFAULT_EXTENSIONS: frozenset[str] = frozenset(
    {".txt", ".pdf", ".docx", ".pptx", ".xlsx", ".md", ".html", ".doc"}
)

# Fixed queries used to pull broad result sets from the index.
BROAD_SEARCH_QUERIES: tuple[str, ...] = ("document", "information", "the")
LISTING_QUERIES: tuple[str, ...] = ("the", "and", "information")
LISTING_FALLBACK_QUERY = "content"
CONTENTS_QUERIES: tuple[str, ...] = ("document", "information", "content", "the")


class SourceConfig(BaseModel):
    """What the source resolver is allowed to pick up."""

    allowed_extensions: frozenset[str] = DEFAULT_EXTENSIONS

    def accepts(self, filename: str) -> bool:
        """Case-insensitive suffix match against the allow-list."""
        lower = filename.lower()
        return any(lower.endswith(ext.lower()) for ext in self.allowed_extensions)


class ChunkerConfig(BaseModel):
    """Token-based splitting parameters."""

    chunk_size: int = 1000
    chunk_overlap: int = 50
    min_chunk_chars: int = 10
    max_chunk_chars: int = 10000
    keep_separator: bool = True
    encoding_name: str = "cl100k_base"


class RetrievalConfig(BaseModel):
    """Auxiliary query sets and output budgets for the search service."""

    broad_search_queries: tuple[str, ...] = BROAD_SEARCH_QUERIES
    listing_queries: tuple[str, ...] = LISTING_QUERIES
    listing_fallback_query: str = LISTING_FALLBACK_QUERY
    contents_queries: tuple[str, ...] = CONTENTS_QUERIES

    broad_keywords: tuple[str, ...] = ("content", "summary", "summarize", "read", "tell")
    long_text_keywords: tuple[str, ...] = ("content", "summary", "summarize", "read")
    top_n: int = 3
    index_top_k: int = 4
    long_max_length: int = 1500
    short_max_length: int = 800
    divider: str = "\n---\n\n"
    parallel_queries: bool = False


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Ingestion
    documents_source: str = Field(
        default="",
        description=(
            "Where bulk documents come from. Either a filesystem directory or "
            "'resource:<package>[/<subdir>]' for files bundled inside a package."
        ),
    )
    load_on_startup: bool = False
    allowed_extensions: frozenset[str] = DEFAULT_EXTENSIONS
    upload_dir: Path = Path(tempfile.gettempdir()) / "scoped-rag-uploads"

    # Chunking
    chunk_size_tokens: int = 1000
    chunk_overlap_tokens: int = 50
    min_chunk_chars: int = 10
    max_chunk_chars: int = 10000
    keep_separator: bool = True
    tokenizer_encoding: str = "cl100k_base"

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "scoped_rag"

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Retrieval
    search_top_n: int = 3
    index_top_k: int = 4
    parallel_queries: bool = False

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def source_config(self) -> SourceConfig:
        return SourceConfig(allowed_extensions=self.allowed_extensions)

    def chunker_config(self) -> ChunkerConfig:
        return ChunkerConfig(
            chunk_size=self.chunk_size_tokens,
            chunk_overlap=self.chunk_overlap_tokens,
            min_chunk_chars=self.min_chunk_chars,
            max_chunk_chars=self.max_chunk_chars,
            keep_separator=self.keep_separator,
            encoding_name=self.tokenizer_encoding,
        )

    def retrieval_config(self) -> RetrievalConfig:
        return RetrievalConfig(
            top_n=self.search_top_n,
            index_top_k=self.index_top_k,
            parallel_queries=self.parallel_queries,
        )


# Singleton — import `settings` wherever needed.
settings = Settings()
