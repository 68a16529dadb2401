"""Public interface definitions for every pluggable ingestion collaborator.

Pipeline stages talk to sources, decoders, processors, chunking
strategies, token counters, AI services and writers exclusively through
the abstract base classes defined here.  Concrete implementations are
injected when the pipeline is built, so tests can swap in fakes.

CONCRETE IMPLEMENTATION MAP:
    Interface              ->  Concrete implementations
    -----------------------------------------------------------------
    IDocumentSource        ->  FileSystemDocumentSource
    IDocumentDecoder       ->  PlainTextDecoder, MarkdownDecoder
    IDocumentProcessor     ->  TextNormalizationProcessor,
                               MetadataExtractionProcessor
    IChunkProcessor        ->  SummaryChunkProcessor
    IChunkingStrategy      ->  HeaderBasedChunkingStrategy,
                               SectionBasedChunkingStrategy,
                               SemanticSimilarityChunkingStrategy,
                               TokenBasedChunkingStrategy,
                               FallbackChunkingStrategy
    ISectionDetector       ->  MarkdownSectionDetector
    ITokenCounter          ->  WhitespaceTokenCounter,
                               HuggingFaceTokenCounter
    IDocumentWriter        ->  InMemoryDocumentWriter
    ILLMProvider           ->  RetryingLLMProvider (decorator)
    IEmbeddingProvider     ->  RetryingEmbeddingProvider (decorator)
    IIngestionMiddleware   ->  ErrorHandlingMiddleware, ReaderMiddleware,
                               DocumentProcessorMiddleware,
                               ChunkingMiddleware, WriterMiddleware
"""

from ingestkit.interfaces.chunking import IChunkingStrategy, ISectionDetector, ITokenCounter
from ingestkit.interfaces.document_decoder import IDocumentDecoder
from ingestkit.interfaces.document_source import IDocumentSource, IIngestionFile
from ingestkit.interfaces.document_writer import IDocumentWriter
from ingestkit.interfaces.embedding_provider import IEmbeddingProvider
from ingestkit.interfaces.llm_provider import ILLMProvider
from ingestkit.interfaces.middleware import IIngestionMiddleware, IngestionDelegate
from ingestkit.interfaces.processors import IChunkProcessor, IDocumentProcessor

__all__ = [
    "IChunkProcessor",
    "IChunkingStrategy",
    "IDocumentDecoder",
    "IDocumentProcessor",
    "IDocumentSource",
    "IDocumentWriter",
    "IEmbeddingProvider",
    "IIngestionFile",
    "IIngestionMiddleware",
    "ILLMProvider",
    "ISectionDetector",
    "ITokenCounter",
    "IngestionDelegate",
]
