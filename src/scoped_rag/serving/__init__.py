"""
Serving — FastAPI application exposing upload, ingestion and retrieval.
"""
