"""LangChain tool definitions exposed to a tool-calling model.

Each tool returns human-readable text, never structured data, so the
model can relay it to the user as-is.

Dependency-injection note
-------------------------
Tools resolve their services through :func:`get_retriever` and
:func:`get_ingestion`.  Both are cached; tests patch them to inject
fakes.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from langchain_core.tools import tool

from scoped_rag.ingestion.service import IngestionService
from scoped_rag.retrieval.retriever import ConversationRetriever

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_retriever() -> ConversationRetriever:
    """Lazily built so importing this module doesn't connect to Chroma."""
    return ConversationRetriever()


@lru_cache(maxsize=1)
def get_ingestion() -> IngestionService:
    return IngestionService.from_settings()


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@tool
def search_documents(query: str, conversation_id: str = "") -> str:
    """Search through uploaded documents to find relevant information.

    Use this when the user asks questions about uploaded files or requests
    information that might be in their documents.  For broad requests like
    'read contents' or 'summarize', use general terms like 'document',
    'information', or 'content'.
    """
    logger.info("search_documents called: query=%r conversation_id=%r", query, conversation_id)
    return get_retriever().search(query, conversation_id)


@tool
def list_uploaded_documents(conversation_id: str) -> str:
    """List all documents uploaded and processed in the current conversation.

    Useful for showing the user what files are available for querying.
    """
    return get_retriever().list_documents(conversation_id)


@tool
def get_document_contents(conversation_id: str) -> str:
    """Get the contents of the documents uploaded in the current conversation.

    Use this when the user specifically asks to read, show, or get the
    contents of their uploaded files.
    """
    return get_retriever().get_document_contents(conversation_id)


@tool
def process_uploaded_file(
    conversation_id: str,
    original_filename: str,
    temp_filename: str,
    file_type: str = "",
) -> str:
    """Process a file the user uploaded and add it to the knowledge base.

    Pass the temp filename returned by the upload endpoint.
    """
    return get_ingestion().ingest_upload(conversation_id, original_filename, temp_filename, file_type or None)


# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

TOOL_REGISTRY: dict[str, Any] = {
    "search_documents": search_documents,
    "list_uploaded_documents": list_uploaded_documents,
    "get_document_contents": get_document_contents,
    "process_uploaded_file": process_uploaded_file,
}
"""Mapping of tool name → tool callable."""
