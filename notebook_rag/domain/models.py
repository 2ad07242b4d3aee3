# notebook_rag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    PDF = "pdf"
    YOUTUBE = "youtube"
    TEXT = "text"


@dataclass(frozen=True)
class RawSourceItem:
    """
    One normalized input, ready for chunking.

    - source:  human readable origin (PDF file name, YouTube URL or "raw")
    - kind:    which extractor produced the text
    - text:    extracted text, consumed exactly once by the chunking stage
    """

    source: str
    kind: SourceKind
    text: str


@dataclass(frozen=True)
class Chunk:
    """A word window of a RawSourceItem; index is its 0-based position in the item."""

    text: str
    index: int


@dataclass(frozen=True)
class IndexedVector:
    """
    Immutable record written to the vector store.

    - id:        deterministic id derived from (kind, source, chunk index)
    - values:    embedding of metadata["text"]
    - metadata:  source, kind, chunk_index and text; the text is the only way
                 to recover the chunk at query time
    """

    id: str
    values: tuple[float, ...]
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StoreMatch:
    """Raw nearest-neighbour hit as returned by a vector store adapter."""

    id: str
    score: float | None
    metadata: Mapping[str, Any] | None


@dataclass(frozen=True)
class ContextChunk:
    """A retrieved chunk that carries text and is used for generation."""

    text: str
    score: float | None = None
    source: str | None = None
    kind: str | None = None
    chunk_index: int | None = None


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str
