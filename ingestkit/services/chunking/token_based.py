"""Fixed token-window chunking with start/end token offsets."""

from __future__ import annotations

from ingestkit.models.ingestion import MetadataKeys
from ingestkit.services.chunking.base import BaseChunkingStrategy, ChunkPiece
from ingestkit.utils.cancellation import CancellationToken


class TokenBasedChunkingStrategy(BaseChunkingStrategy):
    """Cut the whole document into consecutive windows of at most
    ``max_tokens_per_chunk`` tokens, ignoring document structure.

    Each chunk records the token offsets of its window under the
    ``start-token`` and ``end-token`` metadata keys.
    """

    name = "token-based"

    def _whole_document_piece(self, content: str, token_count: int) -> ChunkPiece:
        return ChunkPiece(
            content,
            token_count,
            {MetadataKeys.START_TOKEN: 0, MetadataKeys.END_TOKEN: token_count},
        )

    async def _split(
        self, text: str, cancellation: CancellationToken | None
    ) -> list[ChunkPiece]:
        pieces: list[ChunkPiece] = []
        for start, end in self._split_spans(text):
            piece = text[start:end].strip()
            if not piece:
                continue
            start_token = self._count(text[:start])
            count = self._count(piece)
            pieces.append(
                ChunkPiece(
                    piece,
                    count,
                    {
                        MetadataKeys.START_TOKEN: start_token,
                        MetadataKeys.END_TOKEN: start_token + count,
                    },
                )
            )
        return pieces
