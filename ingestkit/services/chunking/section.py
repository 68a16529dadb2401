"""Section-based chunking with a pluggable section detector."""

from __future__ import annotations

from ingestkit.interfaces.chunking import ISectionDetector, ITokenCounter
from ingestkit.models.ingestion import ChunkingOptions
from ingestkit.services.chunking.base import BaseChunkingStrategy, ChunkPiece
from ingestkit.services.chunking.markdown import split_markdown
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import ChunkingError, ConfigurationError


class MarkdownSectionDetector(ISectionDetector):
    """Sections begin at headings up to *heading_level* (default 2).

    Thematic breaks (``---``, ``***``, ``___``) and form feeds also end a
    section; the separators themselves are dropped.
    """

    def __init__(self, heading_level: int = 2) -> None:
        if not 1 <= heading_level <= 6:
            raise ConfigurationError(
                f"heading_level must be between 1 and 6, got {heading_level}"
            )
        self._heading_level = heading_level

    @property
    def heading_level(self) -> int:
        return self._heading_level

    def split(self, text: str) -> list[str]:
        return split_markdown(text, max_level=self._heading_level, split_on_breaks=True)


class SectionBasedChunkingStrategy(BaseChunkingStrategy):
    """One chunk per detected section, force-split when over budget."""

    name = "section-based"

    def __init__(
        self,
        options: ChunkingOptions,
        token_counter: ITokenCounter,
        section_detector: ISectionDetector | None = None,
    ) -> None:
        super().__init__(options, token_counter)
        self._section_detector = section_detector or MarkdownSectionDetector()

    async def _split(
        self, text: str, cancellation: CancellationToken | None
    ) -> list[ChunkPiece]:
        try:
            sections = self._section_detector.split(text)
        except Exception as exc:
            raise ChunkingError(f"Section detection failed: {exc}") from exc
        return self._fit_units(sections)
