"""Document and chunk processors."""

from ingestkit.services.processors.metadata_extraction import MetadataExtractionProcessor
from ingestkit.services.processors.normalization import TextNormalizationProcessor
from ingestkit.services.processors.summary import SummaryChunkProcessor

__all__ = [
    "MetadataExtractionProcessor",
    "SummaryChunkProcessor",
    "TextNormalizationProcessor",
]
