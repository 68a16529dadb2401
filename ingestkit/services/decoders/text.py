"""Decoders for UTF-8 text and Markdown files.

The document identifier is the item's name as reported by the source
(for the file-system source, the POSIX path relative to the root), so it
is stable across runs and unique within one.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import PurePosixPath
from typing import BinaryIO

from ingestkit.interfaces.document_decoder import IDocumentDecoder
from ingestkit.interfaces.document_source import IIngestionFile
from ingestkit.models.ingestion import IngestionDocument, MetadataKeys, MetadataValue
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import DecodingError

_ATX_TITLE = re.compile(r"^ {0,3}#{1,6}[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")


class PlainTextDecoder(IDocumentDecoder):
    """Decode UTF-8 text (a leading BOM is dropped)."""

    def __init__(self, encoding: str = "utf-8-sig") -> None:
        self._encoding = encoding

    def supported_extensions(self) -> tuple[str, ...]:
        return (".txt",)

    async def decode(
        self,
        stream: BinaryIO,
        file: IIngestionFile,
        cancellation: CancellationToken,
    ) -> IngestionDocument:
        cancellation.raise_if_cancelled()
        raw = await asyncio.to_thread(stream.read)
        try:
            content = raw.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise DecodingError(
                message=f"'{file.name}' is not valid {self._encoding}: {exc.reason}",
                provider_name=type(self).__name__,
            ) from exc

        metadata: dict[str, MetadataValue] = {
            MetadataKeys.SOURCE_PATH: file.name,
            MetadataKeys.FILE_NAME: PurePosixPath(file.name).name,
            MetadataKeys.EXTENSION: file.extension.lower(),
        }
        title = self._title(content)
        if title:
            metadata[MetadataKeys.TITLE] = title
        return IngestionDocument(id=file.name, content=content, metadata=metadata)

    def _title(self, content: str) -> str | None:
        return None


class MarkdownDecoder(PlainTextDecoder):
    """Decode Markdown, keeping the markup for heading-aware chunking.

    The first heading (ATX or setext) becomes the ``title`` metadata entry.
    """

    def supported_extensions(self) -> tuple[str, ...]:
        return (".md", ".markdown")

    def _title(self, content: str) -> str | None:
        lines = content.splitlines()
        for position, line in enumerate(lines):
            match = _ATX_TITLE.match(line)
            if match:
                return match.group(1).strip()
            following = lines[position + 1] if position + 1 < len(lines) else ""
            if line.strip() and _SETEXT_UNDERLINE.match(following):
                return line.strip()
        return None
