"""FastAPI application exposing uploads, ingestion and retrieval over HTTP."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from scoped_rag.agent.tools import get_ingestion, get_retriever
from scoped_rag.config import settings
from scoped_rag.ingestion.service import IngestionService
from scoped_rag.retrieval.retriever import ConversationRetriever

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Bulk-load configured documents before serving, when enabled."""
    if settings.load_on_startup:
        await run_in_threadpool(get_ingestion().load_on_startup)
    yield


app = FastAPI(
    title="Scoped RAG API",
    version="0.1.0",
    description="Upload documents into a conversation and query them.",
    lifespan=lifespan,
)


# ── Request / Response schemas ────────────────────────────────────────
class IngestRequest(BaseModel):
    """Hand a previously uploaded temp file to the ingestion pipeline."""

    conversation_id: str
    original_filename: str
    temp_filename: str
    file_type: str | None = None


class SearchRequest(BaseModel):
    """Natural-language query, optionally scoped to one conversation."""

    query: str
    conversation_id: str = ""


class TextResponse(BaseModel):
    """Every retrieval/ingestion route answers with a sentence or text blob."""

    text: str


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/api/supported-types")
async def supported_types() -> dict[str, Any]:
    return {
        "supportedExtensions": sorted(settings.allowed_extensions),
        "description": "Supported document formats for processing",
    }


@app.post("/api/upload")
async def upload(
    file: UploadFile = File(...),
    conversation_id: str = Form(default="", alias="conversationId"),
    ingestion: IngestionService = Depends(get_ingestion),
) -> JSONResponse:
    """Store the upload under a unique temp name; ingestion happens later."""
    if not file.filename or not file.filename.strip():
        return JSONResponse({"error": "Invalid filename", "success": False}, status_code=400)

    logger.info("Received file upload: %s for conversation: %s", file.filename, conversation_id)
    data = await file.read()
    try:
        temp_filename = await run_in_threadpool(ingestion.uploads.save, file.filename, data)
    except OSError as exc:
        logger.error("File upload failed: %s", exc)
        return JSONResponse({"error": f"Upload failed: {exc}", "success": False}, status_code=500)

    return JSONResponse(
        {
            "success": True,
            "message": "File uploaded successfully",
            "filename": file.filename,
            "tempFilename": temp_filename,
            "size": len(data),
            "contentType": file.content_type or "application/octet-stream",
            "conversationId": conversation_id,
        }
    )


@app.post("/api/ingest", response_model=TextResponse)
def ingest(
    request: IngestRequest,
    ingestion: IngestionService = Depends(get_ingestion),
) -> TextResponse:
    text = ingestion.ingest_upload(
        request.conversation_id,
        request.original_filename,
        request.temp_filename,
        request.file_type,
    )
    return TextResponse(text=text)


@app.post("/api/search", response_model=TextResponse)
def search(
    request: SearchRequest,
    retriever: ConversationRetriever = Depends(get_retriever),
) -> TextResponse:
    return TextResponse(text=retriever.search(request.query, request.conversation_id))


@app.get("/api/conversations/{conversation_id}/documents", response_model=TextResponse)
def list_documents(
    conversation_id: str,
    retriever: ConversationRetriever = Depends(get_retriever),
) -> TextResponse:
    return TextResponse(text=retriever.list_documents(conversation_id))


@app.get("/api/conversations/{conversation_id}/contents", response_model=TextResponse)
def document_contents(
    conversation_id: str,
    retriever: ConversationRetriever = Depends(get_retriever),
) -> TextResponse:
    return TextResponse(text=retriever.get_document_contents(conversation_id))
