"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging

import chromadb
from langchain_huggingface import HuggingFaceEmbeddings

from scoped_rag.config import settings
from scoped_rag.retrieval.base import VectorStoreBase
from scoped_rag.retrieval.models import Chunk, ChunkMetadata

logger = logging.getLogger(__name__)


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Embeddings are computed client-side with a HuggingFace sentence
    transformer, so the server only stores vectors.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    embedding_model:
        HuggingFace model id used for text → embedding conversion.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        embedding_model: str = settings.embedding_model,
    ) -> None:
        super().__init__(collection_name)
        self._client = chromadb.HttpClient(host=host, port=port)
        self._collection = self._client.get_or_create_collection(collection_name)
        self._embedder = HuggingFaceEmbeddings(model_name=embedding_model)

    # -- VectorStoreBase overrides --------------------------------------------

    def add(self, chunks: list[Chunk]) -> list[str]:
        ids = [c.id for c in chunks]
        if any(cid is None for cid in ids):
            raise ValueError("every chunk needs an id before it can be stored")

        texts = [c.text for c in chunks]
        # ``add`` rather than ``upsert``: the index is append-only.
        self._collection.add(
            ids=ids,
            embeddings=self._embedder.embed_documents(texts),
            documents=texts,
            metadatas=[c.metadata.to_store() or None for c in chunks],
        )
        return ids

    def similarity_search(self, query: str, *, k: int = 4) -> list[Chunk]:
        results = self._collection.query(
            query_embeddings=[self._embedder.embed_query(query)],
            n_results=k,
            include=["documents", "metadatas"],
        )

        ids = results.get("ids", [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]

        return [
            Chunk(id=doc_id, text=text or "", metadata=ChunkMetadata.from_store(meta))
            for doc_id, text, meta in zip(ids, docs, metas)
        ]

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
