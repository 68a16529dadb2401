"""File-system document source.

Walks a root directory recursively and yields one :class:`LocalFile` per
regular file, in sorted relative-path order so runs are reproducible.
Hidden files and directories (names starting with ``.``) are skipped.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from pathlib import Path
from typing import BinaryIO

import structlog

from ingestkit.interfaces.document_source import IDocumentSource, IIngestionFile
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


class LocalFile(IIngestionFile):
    """A file on disk, named by its POSIX path relative to the source root."""

    def __init__(self, path: Path, root: Path) -> None:
        self._path = path
        self._name = path.relative_to(root).as_posix()

    @property
    def name(self) -> str:
        return self._name

    @property
    def extension(self) -> str:
        return self._path.suffix

    @property
    def path(self) -> Path:
        return self._path

    async def open_read(self) -> BinaryIO:
        return await asyncio.to_thread(self._path.open, "rb")

    def __repr__(self) -> str:
        return f"LocalFile({self._name!r})"


class FileSystemDocumentSource(IDocumentSource):
    """Enumerates files under *root*.

    Parameters
    ----------
    root:
        Directory to walk.  Must exist.
    extensions:
        Optional allow-list of extensions (case-insensitive, with or
        without the leading dot).  ``None`` yields every file and leaves
        filtering to the reader's decoder registry.
    recursive:
        Descend into sub-directories (default ``True``).
    """

    def __init__(
        self,
        root: str | Path,
        extensions: Iterable[str] | None = None,
        recursive: bool = True,
    ) -> None:
        self._root = Path(root).expanduser().resolve()
        if not self._root.is_dir():
            raise ConfigurationError(f"Source directory does not exist: {self._root}")
        self._extensions = (
            None
            if extensions is None
            else frozenset(
                ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions
            )
        )
        self._recursive = recursive

    @property
    def root(self) -> Path:
        return self._root

    def get_provider_name(self) -> str:
        return f"filesystem:{self._root}"

    async def read(self, cancellation: CancellationToken | None = None) -> AsyncIterator[IIngestionFile]:
        paths = await asyncio.to_thread(self._discover)
        logger.info("source_discovered_files", root=str(self._root), files=len(paths))
        for path in paths:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            yield LocalFile(path, self._root)

    def _discover(self) -> list[Path]:
        pattern = "**/*" if self._recursive else "*"
        found: list[Path] = []
        for path in self._root.glob(pattern):
            relative = path.relative_to(self._root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if not path.is_file():
                continue
            if self._extensions is not None and path.suffix.lower() not in self._extensions:
                continue
            found.append(path)
        return sorted(found, key=lambda p: p.relative_to(self._root).as_posix())
