"""Document writers."""

from ingestkit.providers.writer.in_memory_writer import InMemoryDocumentWriter

__all__ = ["InMemoryDocumentWriter"]
