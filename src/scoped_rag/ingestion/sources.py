"""Source resolution — turn a descriptor into the files to ingest.

Two descriptor forms are understood:

* ``resource:<package>[/<subdir>]`` — files bundled inside an installed
  package, located with :mod:`importlib.resources`.
* anything else — a directory on the local filesystem.

Both walk the tree recursively and keep only files whose suffix is on the
allow-list in :class:`~scoped_rag.config.SourceConfig`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Iterator

from scoped_rag.config import SourceConfig
from scoped_rag.errors import SourceNotFoundError

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "resource:"

# Used when a resource cannot tell us where it lives.
UNKNOWN_URI = "resource"


@dataclass(frozen=True)
class SourceFile:
    """One candidate file: its bare name plus a readable handle."""

    filename: str
    resource: Traversable
    uri: str = UNKNOWN_URI

    def read_bytes(self) -> bytes:
        return self.resource.read_bytes()


def safe_uri(resource: Traversable) -> str:
    """Best-effort URI for *resource*; never raises."""
    try:
        if isinstance(resource, Path):
            return resource.resolve().as_uri()
        return f"{RESOURCE_PREFIX}{resource}"
    except Exception:
        logger.debug("No URI for %r, using %r", resource, UNKNOWN_URI, exc_info=True)
        return UNKNOWN_URI


def resolve_sources(descriptor: str, config: SourceConfig | None = None) -> list[SourceFile]:
    """Enumerate ingestible files under *descriptor*.

    Parameters
    ----------
    descriptor:
        ``resource:`` root or filesystem directory.
    config:
        Extension allow-list; defaults to the eight supported formats.

    Returns
    -------
    list[SourceFile]
        Matching files ordered by relative path.  Empty (with a warning)
        when nothing matches.

    Raises
    ------
    SourceNotFoundError
        The directory or package does not exist.
    """
    config = config or SourceConfig()

    if descriptor.startswith(RESOURCE_PREFIX):
        root = _resource_root(descriptor[len(RESOURCE_PREFIX):])
        mode = "resource"
    else:
        path = Path(descriptor).expanduser()
        if not path.is_dir():
            raise SourceNotFoundError(
                f"Document folder does not exist or is not a directory: {descriptor}"
            )
        root = path
        mode = "filesystem"

    found = sorted(_walk(root, ""), key=lambda item: item[0])
    logger.info("Found %d %s entries under %s, filtering by extension", len(found), mode, descriptor)

    files = [
        SourceFile(filename=entry.name, resource=entry, uri=safe_uri(entry))
        for _, entry in found
        if config.accepts(entry.name)
    ]
    if not files:
        logger.warning(
            "No files found under %s with extensions: %s",
            descriptor,
            ", ".join(sorted(config.allowed_extensions)),
        )
    return files


def _resource_root(spec: str) -> Traversable:
    package, _, subdir = spec.strip("/").partition("/")
    if not package:
        raise SourceNotFoundError(f"Resource descriptor names no package: {RESOURCE_PREFIX}{spec}")
    try:
        root = resources.files(package)
    except ModuleNotFoundError as exc:
        raise SourceNotFoundError(f"Package {package!r} is not importable") from exc
    for part in filter(None, subdir.split("/")):
        root = root / part
    if not root.is_dir():
        raise SourceNotFoundError(f"Resource folder not found: {RESOURCE_PREFIX}{spec}")
    return root


def _walk(node: Traversable, prefix: str) -> Iterator[tuple[str, Traversable]]:
    for child in node.iterdir():
        rel = f"{prefix}{child.name}"
        if child.is_dir():
            yield from _walk(child, rel + "/")
        elif child.is_file():
            yield rel, child
