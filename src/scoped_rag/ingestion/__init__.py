"""
Ingestion — source resolution, extraction, chunking, tagging and storage.

This module is responsible for the ETL-like pipeline that converts raw
documents (PDF, office formats, Markdown, HTML, …) into tagged chunks
stored in a vector database, either in bulk at startup or one upload at
a time for a conversation.
"""
