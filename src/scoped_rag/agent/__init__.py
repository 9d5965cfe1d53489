"""
Agent tools — the ingestion and retrieval entry points as LangChain tools.

Public API
----------
- :data:`TOOL_REGISTRY` — tool name → tool callable.
"""

from scoped_rag.agent.tools import TOOL_REGISTRY

__all__ = ["TOOL_REGISTRY"]
