"""Conversation-scoped document ingestion and retrieval."""

__version__ = "0.1.0"
