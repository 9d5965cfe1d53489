"""Plain-text rendering of retrieval results for conversational callers."""

from __future__ import annotations

from scoped_rag.retrieval.models import Chunk

ELLIPSIS = "..."

SEARCH_HEADER = "Based on your uploaded documents, here's what I found:\n\n"
LISTING_HEADER = "📚 **Documents available in this conversation:**\n\n"
CONTENTS_HEADER = "📄 **Complete Document Contents:**\n\n"
CONTENTS_NOTE = (
    "_Chunks are shown in retrieval order, which may differ from the order "
    "of the original document._\n\n"
)

NO_QUERY = "Please provide a search query."
NO_CONVERSATION = "No conversation ID provided."
NOTHING_IN_CONVERSATION = (
    "I couldn't find any relevant information in your uploaded documents for this query. "
    "Make sure you've uploaded documents and they contain information related to your question."
)
NOTHING_FOUND = "No relevant documents found for this query."
NO_DOCUMENTS_YET = (
    "No documents have been uploaded and processed in this conversation yet. "
    "Upload a document using the upload button above to get started!"
)
NO_CONTENTS = "No documents found in this conversation. Please upload a document first."


def truncate(text: str, max_length: int) -> str:
    """Cut *text* to *max_length* characters, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def format_search(chunks: list[Chunk], max_length: int, divider: str) -> str:
    parts = [
        f"📄 **{chunk.display_name}**\n{truncate(chunk.text, max_length)}\n"
        for chunk in chunks
    ]
    return SEARCH_HEADER + divider.join(parts)


def distinct_filenames(chunks: list[Chunk]) -> list[str]:
    """``original_filename`` values in first-seen order."""
    seen: dict[str, None] = {}
    for chunk in chunks:
        seen.setdefault(chunk.metadata.original_filename or "Unknown", None)
    return list(seen)


def format_listing(chunks: list[Chunk]) -> str:
    files = distinct_filenames(chunks)
    lines = [f"{i}. {name}" for i, name in enumerate(files, 1)]
    return (
        LISTING_HEADER
        + "\n".join(lines)
        + f"\n\nTotal: {len(files)} document(s) with {len(chunks)} text chunks processed."
        + "\n\nYou can now ask me questions about any of these documents!"
    )


def format_contents(chunks: list[Chunk], divider: str) -> str:
    """Group chunk texts under their file, files in first-seen order.

    A best-effort reassembly: chunk order is retrieval order, and only the
    chunks the index happened to return are included.
    """
    grouped: dict[str, list[str]] = {}
    for chunk in chunks:
        grouped.setdefault(chunk.metadata.original_filename or "Unknown", []).append(chunk.text)

    body = "".join(
        f"📄 **{name}**\n\n" + "".join(f"{text}\n" for text in texts) + divider
        for name, texts in grouped.items()
    )
    return CONTENTS_HEADER + CONTENTS_NOTE + body


def format_error(action: str, exc: BaseException) -> str:
    return f"Error {action}: {exc}"
