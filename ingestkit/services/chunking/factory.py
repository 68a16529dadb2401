"""Factory helpers for building chunking strategies by name."""

from __future__ import annotations

from enum import Enum

from ingestkit.interfaces.chunking import IChunkingStrategy, ISectionDetector, ITokenCounter
from ingestkit.interfaces.embedding_provider import IEmbeddingProvider
from ingestkit.models.ingestion import ChunkingOptions
from ingestkit.services.chunking.fallback import FallbackChunkingStrategy
from ingestkit.services.chunking.header import HeaderBasedChunkingStrategy
from ingestkit.services.chunking.section import SectionBasedChunkingStrategy
from ingestkit.services.chunking.semantic import (
    DEFAULT_SIMILARITY_THRESHOLD,
    SemanticSimilarityChunkingStrategy,
)
from ingestkit.services.chunking.token_based import TokenBasedChunkingStrategy
from ingestkit.utils.errors import ConfigurationError


class ChunkingStrategyKind(str, Enum):
    """Names accepted by :meth:`ChunkingStrategyFactory.create`."""

    HEADER = "header"
    SECTION = "section"
    SEMANTIC = "semantic"
    TOKEN = "token"


class ChunkingStrategyFactory:
    """Builds chunking strategies from options and collaborators."""

    @staticmethod
    def create_header_based(
        options: ChunkingOptions, token_counter: ITokenCounter
    ) -> HeaderBasedChunkingStrategy:
        return HeaderBasedChunkingStrategy(options, token_counter)

    @staticmethod
    def create_section_based(
        options: ChunkingOptions,
        token_counter: ITokenCounter,
        section_detector: ISectionDetector | None = None,
    ) -> SectionBasedChunkingStrategy:
        return SectionBasedChunkingStrategy(options, token_counter, section_detector)

    @staticmethod
    def create_semantic_similarity(
        options: ChunkingOptions,
        token_counter: ITokenCounter,
        embedding_provider: IEmbeddingProvider | None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        fallback: IChunkingStrategy | None = None,
    ) -> IChunkingStrategy:
        """Build a semantic strategy, optionally wrapped with a fallback.

        When *fallback* is given, embedding outages re-chunk the document
        with it instead of failing the stage.
        """
        strategy = SemanticSimilarityChunkingStrategy(
            options, token_counter, embedding_provider, similarity_threshold
        )
        if fallback is None:
            return strategy
        return FallbackChunkingStrategy(strategy, fallback)

    @staticmethod
    def create_token_based(
        options: ChunkingOptions, token_counter: ITokenCounter
    ) -> TokenBasedChunkingStrategy:
        return TokenBasedChunkingStrategy(options, token_counter)

    @classmethod
    def create(
        cls,
        kind: ChunkingStrategyKind | str,
        options: ChunkingOptions,
        token_counter: ITokenCounter,
        *,
        embedding_provider: IEmbeddingProvider | None = None,
        section_detector: ISectionDetector | None = None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> IChunkingStrategy:
        """Build the strategy named by *kind*.

        Raises
        ------
        ConfigurationError
            If *kind* is unknown or a required collaborator is missing.
        """
        try:
            resolved = ChunkingStrategyKind(str(getattr(kind, "value", kind)).lower())
        except ValueError as exc:
            valid = ", ".join(k.value for k in ChunkingStrategyKind)
            raise ConfigurationError(
                f"Unknown chunking strategy '{kind}'. Expected one of: {valid}"
            ) from exc

        if resolved is ChunkingStrategyKind.HEADER:
            return cls.create_header_based(options, token_counter)
        if resolved is ChunkingStrategyKind.SECTION:
            return cls.create_section_based(options, token_counter, section_detector)
        if resolved is ChunkingStrategyKind.SEMANTIC:
            return cls.create_semantic_similarity(
                options, token_counter, embedding_provider, similarity_threshold
            )
        return cls.create_token_based(options, token_counter)
