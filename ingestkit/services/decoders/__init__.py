"""Document decoders, keyed by file extension."""

from ingestkit.interfaces.document_decoder import IDocumentDecoder
from ingestkit.services.decoders.text import MarkdownDecoder, PlainTextDecoder


def default_decoders() -> dict[str, IDocumentDecoder]:
    """Return a fresh extension -> decoder registry for text and Markdown."""
    registry: dict[str, IDocumentDecoder] = {}
    for decoder in (PlainTextDecoder(), MarkdownDecoder()):
        for extension in decoder.supported_extensions():
            registry[extension] = decoder
    return registry


__all__ = ["MarkdownDecoder", "PlainTextDecoder", "default_decoders"]
