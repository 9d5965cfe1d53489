"""Exception taxonomy shared by ingestion and retrieval."""

from __future__ import annotations


class ScopedRagError(Exception):
    """Base class for every error raised by this package."""


# -- ingestion -------------------------------------------------------------


class IngestionError(ScopedRagError):
    """Something went wrong while getting documents into the index."""


class SourceNotFoundError(IngestionError):
    """The bulk source descriptor does not point at anything readable."""


class ExtractionError(IngestionError):
    """A single file could not be converted to text.

    Non-fatal during bulk loads: the file is skipped and loading continues.
    """

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"could not extract text from {filename!r}: {reason}")
        self.filename = filename
        self.reason = reason


class StoreWriteError(IngestionError):
    """The vector index rejected a batch. Aborts the current batch."""


# -- retrieval -------------------------------------------------------------


class RetrievalError(ScopedRagError):
    """Base for errors turned into text at the retrieval boundary."""


class InvalidQueryError(RetrievalError):
    """The search query was empty or blank."""


class MissingConversationIdError(RetrievalError):
    """An operation that must be conversation-scoped got no conversation id."""


class IndexQueryError(RetrievalError):
    """Wraps any failure raised by the vector index during a query."""

    def __init__(self, query: str, cause: BaseException) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.query = query
        self.__cause__ = cause
