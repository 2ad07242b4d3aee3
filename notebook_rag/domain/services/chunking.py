from __future__ import annotations

from dataclasses import dataclass

from notebook_rag.domain.errors import ValidationError
from notebook_rag.domain.models import Chunk, RawSourceItem

# ---------- Value Objects ----------


@dataclass(frozen=True)
class ChunkingParams:
    size: int = 1200  # words per window
    overlap: int = 200  # words shared by neighbouring windows

    def validate(self) -> None:
        if self.overlap < 0:
            raise ValidationError(f"overlap must be >= 0, got {self.overlap}")
        if self.size <= self.overlap:
            raise ValidationError(
                f"chunk size must be greater than overlap (size={self.size}, "
                f"overlap={self.overlap})"
            )


# ---------- Word windows ----------


def chunk_words(text: str, size: int = 1200, overlap: int = 200) -> list[str]:
    """Split text into overlapping windows of at most `size` words.

    Consecutive windows share `overlap` words. The last window is the first one
    that reaches the end of the text, so no trailing window is fully contained
    in its predecessor.
    """
    ChunkingParams(size=size, overlap=overlap).validate()

    words = text.split()
    step = size - overlap
    chunks: list[str] = []
    start = 0
    while start < len(words):
        piece = " ".join(words[start : start + size]).strip()
        if piece:
            chunks.append(piece)
        if start + size >= len(words):
            break
        start += step
    return chunks


def chunk_source(item: RawSourceItem, params: ChunkingParams | None = None) -> list[Chunk]:
    """Chunk one source item; indices restart at 0 for every item."""
    p = params or ChunkingParams()
    return [
        Chunk(text=piece, index=i)
        for i, piece in enumerate(chunk_words(item.text, size=p.size, overlap=p.overlap))
    ]


# Eigenschaften:
#
# - Kein I/O, keine Globals.
# - Deterministisch: gleiche Eingabe -> gleiche Fenster -> gleiche Vektor-IDs.
# - overlap >= size wird sofort abgewiesen (sonst Endlosschleife).
