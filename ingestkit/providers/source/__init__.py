"""Document sources."""

from ingestkit.providers.source.local_file_provider import FileSystemDocumentSource, LocalFile

__all__ = ["FileSystemDocumentSource", "LocalFile"]
