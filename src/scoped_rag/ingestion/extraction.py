"""Extraction adapter — format-specific text extraction via LangChain loaders.

Text extraction itself is delegated to ``langchain_community`` document
loaders.  This module only picks the loader, materialises bundled
resources as real files, and reshapes the output into
:class:`~scoped_rag.retrieval.models.Fragment` objects.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Protocol

from langchain_community.document_loaders import (
    BSHTMLLoader,
    Docx2txtLoader,
    PyPDFLoader,
    TextLoader,
    UnstructuredExcelLoader,
    UnstructuredPowerPointLoader,
    UnstructuredWordDocumentLoader,
)

from scoped_rag.errors import ExtractionError
from scoped_rag.ingestion.sources import SourceFile
from scoped_rag.retrieval.models import Fragment

logger = logging.getLogger(__name__)

PROCESSOR_KEY = "processor"

LoaderFactory = Callable[[str], Any]


def _html_loader(path: str) -> BSHTMLLoader:
    # Default parser is lxml; stick to the stdlib one.
    return BSHTMLLoader(path, bs_kwargs={"features": "html.parser"})


def _text_loader(path: str) -> TextLoader:
    return TextLoader(path, autodetect_encoding=True)


LOADERS: dict[str, LoaderFactory] = {
    ".txt": _text_loader,
    ".md": _text_loader,
    ".html": _html_loader,
    ".pdf": PyPDFLoader,
    ".docx": Docx2txtLoader,
    ".pptx": UnstructuredPowerPointLoader,
    ".xlsx": UnstructuredExcelLoader,
    ".doc": UnstructuredWordDocumentLoader,
}


class Extractor(Protocol):
    """Anything that turns one file into zero or more text fragments."""

    def extract(self, source: SourceFile) -> list[Fragment]: ...


class LoaderExtractor:
    """Default :class:`Extractor` backed by LangChain document loaders.

    Parameters
    ----------
    loaders:
        Suffix → loader factory mapping.  Defaults to :data:`LOADERS`.
    """

    def __init__(self, loaders: dict[str, LoaderFactory] | None = None) -> None:
        self._loaders = dict(LOADERS if loaders is None else loaders)

    def extract(self, source: SourceFile) -> list[Fragment]:
        """Extract *source*; raises :class:`ExtractionError` on any failure."""
        suffix = Path(source.filename).suffix.lower()
        factory = self._loaders.get(suffix)
        if factory is None:
            raise ExtractionError(source.filename, f"no loader for {suffix or 'files without suffix'}")

        try:
            with resources.as_file(source.resource) as path:
                loader = factory(str(path))
                processor = type(loader).__name__
                documents = loader.load()
        except Exception as exc:
            raise ExtractionError(source.filename, str(exc) or type(exc).__name__) from exc

        fragments = [
            Fragment(
                text=doc.page_content,
                source_metadata={**doc.metadata, PROCESSOR_KEY: processor},
            )
            for doc in documents
            if doc.page_content and doc.page_content.strip()
        ]
        logger.info("Extracted %d fragments from %s with %s", len(fragments), source.filename, processor)
        return fragments
