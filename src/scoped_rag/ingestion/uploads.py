"""Temp storage for uploaded files awaiting ingestion."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class UploadStorage:
    """Files live in one directory as ``<uuid4>-<original name>``."""

    def __init__(self, upload_dir: str | Path) -> None:
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(self, original_filename: str, data: bytes) -> str:
        """Persist *data* and return the temp filename to hand to ingestion."""
        name = Path(original_filename).name
        if not name:
            raise ValueError("original filename is empty")
        temp_filename = f"{uuid.uuid4()}-{name}"
        (self.upload_dir / temp_filename).write_bytes(data)
        logger.info("Stored upload %s as %s (%d bytes)", name, temp_filename, len(data))
        return temp_filename

    def resolve(self, temp_filename: str) -> Path | None:
        """Path for *temp_filename*, or ``None`` if it escapes the upload dir."""
        root = self.upload_dir.resolve()
        path = (root / temp_filename).resolve()
        if path.parent != root:
            logger.warning("Rejected temp filename outside the upload dir: %s", temp_filename)
            return None
        return path

    def discard(self, path: Path) -> None:
        """Delete *path* if present; failures are logged, never raised."""
        try:
            path.unlink(missing_ok=True)
            logger.info("Temp file deleted: %s", path)
        except OSError:
            logger.warning("Could not delete temporary file: %s", path, exc_info=True)
