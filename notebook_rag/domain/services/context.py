from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from notebook_rag.domain.models import ContextChunk, StoreMatch


def to_context_chunks(matches: Iterable[StoreMatch]) -> list[ContextChunk]:
    """Keep matches that carry text metadata, best score first.

    The store's own ordering is not trusted after filtering; a missing score
    sorts as 0 and ties keep their original order.
    """
    chunks: list[ContextChunk] = []
    for m in matches:
        md = m.metadata
        if not isinstance(md, Mapping) or not isinstance(md.get("text"), str):
            continue
        chunk_index = md.get("chunk_index")
        chunks.append(
            ContextChunk(
                text=md["text"],
                score=m.score,
                source=_opt_str(md.get("source")),
                kind=_opt_str(md.get("kind")),
                chunk_index=int(chunk_index) if isinstance(chunk_index, int | float) else None,
            )
        )
    chunks.sort(key=lambda c: c.score or 0.0, reverse=True)
    return chunks


def build_context(chunks: Sequence[ContextChunk | Mapping[str, Any]]) -> str:
    """Number chunks with 1-based [#n] markers; the LLM cites these numbers."""
    return "\n\n".join(f"[#{i + 1}] {_text_of(c)}" for i, c in enumerate(chunks))


def _opt_str(value: object) -> str | None:
    return None if value is None else str(value)


def _text_of(chunk: ContextChunk | Mapping[str, Any]) -> str:
    if isinstance(chunk, Mapping):
        return str(chunk["text"])
    return chunk.text
