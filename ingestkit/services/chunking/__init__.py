"""Chunking strategies.

All strategies share one size and overlap policy (see
:mod:`ingestkit.services.chunking.base`) and differ only in where they
look for natural boundaries:

- **header** -- every Markdown heading.
- **section** -- an injected section detector (top-level headings,
  thematic breaks, page breaks by default).
- **semantic** -- paragraph boundaries where adjacent embeddings diverge.
- **token** -- none; fixed token windows.
"""

from ingestkit.services.chunking.base import BaseChunkingStrategy, ChunkPiece
from ingestkit.services.chunking.factory import ChunkingStrategyFactory, ChunkingStrategyKind
from ingestkit.services.chunking.fallback import FallbackChunkingStrategy
from ingestkit.services.chunking.header import HeaderBasedChunkingStrategy
from ingestkit.services.chunking.section import (
    MarkdownSectionDetector,
    SectionBasedChunkingStrategy,
)
from ingestkit.services.chunking.semantic import (
    DEFAULT_SIMILARITY_THRESHOLD,
    SemanticSimilarityChunkingStrategy,
)
from ingestkit.services.chunking.token_based import TokenBasedChunkingStrategy

__all__ = [
    "DEFAULT_SIMILARITY_THRESHOLD",
    "BaseChunkingStrategy",
    "ChunkPiece",
    "ChunkingStrategyFactory",
    "ChunkingStrategyKind",
    "FallbackChunkingStrategy",
    "HeaderBasedChunkingStrategy",
    "MarkdownSectionDetector",
    "SectionBasedChunkingStrategy",
    "SemanticSimilarityChunkingStrategy",
    "TokenBasedChunkingStrategy",
]
