"""Ingestion entry points: bulk loading and per-upload processing.

Flow is one-directional::

    resolve_sources → Extractor → TextChunker → MetadataTagger → StoreWriter

Usage::

    service = IngestionService.from_settings()
    service.load_bulk("resource:my_package/docs")
    print(service.ingest_upload("conv-1", "notes.pdf", temp_name, "application/pdf"))
"""

from __future__ import annotations

import logging

from scoped_rag.config import SourceConfig, settings
from scoped_rag.errors import ExtractionError, IngestionError, SourceNotFoundError
from scoped_rag.ingestion.chunker import TextChunker
from scoped_rag.ingestion.extraction import Extractor, LoaderExtractor
from scoped_rag.ingestion.sources import SourceFile, resolve_sources
from scoped_rag.ingestion.tagger import MetadataTagger, Provenance
from scoped_rag.ingestion.uploads import UploadStorage
from scoped_rag.ingestion.writer import StoreWriter
from scoped_rag.retrieval.base import VectorStoreBase
from scoped_rag.retrieval.models import Chunk

logger = logging.getLogger(__name__)

MSG_NO_CONVERSATION = "Error: No conversation ID provided"
MSG_NO_TEMP_FILE = "Error: No temp filename provided"
MSG_NO_ORIGINAL_NAME = "Error: No original filename provided"
MSG_FILE_MISSING = "Error: Could not find the uploaded file. Please try uploading it again."
MSG_NOTHING_EXTRACTED = (
    "The file was processed, but no content could be extracted. "
    "Please try with a different file."
)


class IngestionService:
    """Wires the ingestion stages together.

    Parameters
    ----------
    store:
        Target vector index.
    uploads:
        Where uploaded files wait to be processed.
    extractor, chunker, tagger:
        Stage implementations; defaults are built from global settings.
    source_config:
        Extension allow-list for bulk loads.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        uploads: UploadStorage,
        *,
        extractor: Extractor | None = None,
        chunker: TextChunker | None = None,
        tagger: MetadataTagger | None = None,
        source_config: SourceConfig | None = None,
    ) -> None:
        self.uploads = uploads
        self.extractor = extractor or LoaderExtractor()
        self.chunker = chunker or TextChunker(settings.chunker_config())
        self.tagger = tagger or MetadataTagger()
        self.writer = StoreWriter(store)
        self.source_config = source_config or settings.source_config()

    @classmethod
    def from_settings(cls, store: VectorStoreBase | None = None) -> IngestionService:
        if store is None:
            from scoped_rag.retrieval.chroma_store import ChromaVectorStore

            store = ChromaVectorStore()
        return cls(store, UploadStorage(settings.upload_dir))

    # -- bulk ----------------------------------------------------------------

    def load_on_startup(self, descriptor: str | None = None, *, enabled: bool | None = None) -> int:
        """Run :meth:`load_bulk` if startup loading is switched on."""
        descriptor = settings.documents_source if descriptor is None else descriptor
        enabled = settings.load_on_startup if enabled is None else enabled
        logger.info("documents_source=%r load_on_startup=%s", descriptor, enabled)
        if not enabled:
            logger.info("Skipping document load on startup")
            return 0
        return self.load_bulk(descriptor)

    def load_bulk(self, descriptor: str) -> int:
        """Ingest every allowed file under *descriptor*.

        A file that fails extraction is logged and skipped.  A bad
        descriptor or a failed store write ends the load; both are logged,
        not raised.  Returns the number of chunks written.
        """
        try:
            sources = resolve_sources(descriptor, self.source_config)
        except SourceNotFoundError as exc:
            logger.error("Bulk load aborted: %s", exc)
            return 0
        logger.info("Bulk load found %d files to process", len(sources))

        chunks: list[Chunk] = []
        for source in sources:
            try:
                chunks.extend(self._chunks_for(source))
            except ExtractionError as exc:
                logger.error("Skipping file: %s", exc)

        try:
            written = self.writer.write(chunks)
        except IngestionError as exc:
            logger.error("Bulk load failed while storing %d chunks: %s", len(chunks), exc)
            return 0
        logger.info("Bulk load from %s finished: %d chunks stored", descriptor, written)
        return written

    # -- uploads -------------------------------------------------------------

    def ingest_upload(
        self,
        conversation_id: str,
        original_filename: str,
        temp_filename: str,
        declared_file_type: str | None = None,
    ) -> str:
        """Process one uploaded file and report the outcome as a sentence.

        The temp file is removed on every path once it has been located.
        """
        logger.info(
            "Processing upload: conversation_id=%s original=%s temp=%s type=%s",
            conversation_id,
            original_filename,
            temp_filename,
            declared_file_type,
        )
        if not conversation_id or not conversation_id.strip():
            return MSG_NO_CONVERSATION
        if not temp_filename or not temp_filename.strip():
            return MSG_NO_TEMP_FILE
        if not original_filename or not original_filename.strip():
            return MSG_NO_ORIGINAL_NAME

        path = self.uploads.resolve(temp_filename)
        if path is None or not path.is_file():
            logger.error("Uploaded file not found: %s", temp_filename)
            return MSG_FILE_MISSING

        try:
            source = SourceFile(filename=original_filename, resource=path, uri=path.as_uri())
            chunks = self._chunks_for(source)
            if not chunks:
                logger.warning("No content extracted from %s", original_filename)
                return MSG_NOTHING_EXTRACTED

            stamp = self.tagger.stamp(conversation_id, original_filename, temp_filename, declared_file_type)
            self.tagger.tag_upload(chunks, stamp)
            written = self.writer.write(chunks)
        except IngestionError as exc:
            logger.error(
                "Error processing uploaded file %s (temp: %s): %s",
                original_filename,
                temp_filename,
                exc,
                exc_info=True,
            )
            return f"Error processing the file: {exc}"
        finally:
            self.uploads.discard(path)

        result = (
            f"Successfully processed file '{original_filename}' and added {written} chunks "
            "to the knowledge base. You can now ask questions about this document."
        )
        logger.info(result)
        return result

    # -- internals -----------------------------------------------------------

    def _chunks_for(self, source: SourceFile) -> list[Chunk]:
        fragments = self.extractor.extract(source)
        if not fragments:
            logger.warning("No documents extracted from %s", source.filename)
            return []
        try:
            chunks = self.chunker.chunk(fragments)
        except Exception as exc:
            raise ExtractionError(source.filename, f"chunking failed: {exc}") from exc
        return self.tagger.tag(chunks, Provenance.for_source(source))


def main(argv: list[str] | None = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Bulk-load documents into the vector store")
    parser.add_argument(
        "source",
        nargs="?",
        default=settings.documents_source,
        help="Directory path or 'resource:<package>[/<subdir>]' (default: DOCUMENTS_SOURCE)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)
    if not args.source:
        parser.error("no source given and DOCUMENTS_SOURCE is not set")

    written = IngestionService.from_settings().load_bulk(args.source)
    print(f"Stored {written} chunks from {args.source}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
