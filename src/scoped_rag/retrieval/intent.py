"""Keyword-based query intent classification."""

from __future__ import annotations

from collections.abc import Iterable

from scoped_rag.retrieval.models import QueryIntent

DEFAULT_BROAD_KEYWORDS = ("content", "summary", "summarize", "read", "tell")


def _mentions(query: str, keywords: Iterable[str]) -> bool:
    lowered = query.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def classify_intent(query: str, keywords: Iterable[str] = DEFAULT_BROAD_KEYWORDS) -> QueryIntent:
    """Return ``BROAD`` if *query* contains any keyword (case-insensitive substring)."""
    return QueryIntent.BROAD if _mentions(query, keywords) else QueryIntent.SPECIFIC


def wants_long_text(query: str, keywords: Iterable[str]) -> bool:
    """Whether results for *query* get the longer excerpt budget."""
    return _mentions(query, keywords)
