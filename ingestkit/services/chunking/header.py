"""Header-based chunking: one chunk per Markdown heading unit."""

from __future__ import annotations

from ingestkit.services.chunking.base import BaseChunkingStrategy, ChunkPiece
from ingestkit.services.chunking.markdown import split_markdown
from ingestkit.utils.cancellation import CancellationToken


class HeaderBasedChunkingStrategy(BaseChunkingStrategy):
    """Start a new unit at every ATX or setext heading, at any level.

    Units are not merged: a short heading section is its own chunk.  A
    unit over budget is force-split with the configured overlap.
    """

    name = "header-based"

    async def _split(
        self, text: str, cancellation: CancellationToken | None
    ) -> list[ChunkPiece]:
        return self._fit_units(split_markdown(text, max_level=6))
