"""Deterministic vector ids and upsert batch planning.

Why: Re-ingesting the same source must overwrite, not duplicate; large upserts
     must be split so the store never sees an oversized request.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from typing import TypeVar

from notebook_rag.domain.errors import ValidationError
from notebook_rag.domain.models import SourceKind

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 200


def derive_vector_id(kind: SourceKind | str, source: str, chunk_index: int) -> str:
    """SHA-1 hex digest of "kind:source:chunk_index"."""
    kind_value = kind.value if isinstance(kind, SourceKind) else str(kind)
    key = f"{kind_value}:{source}:{chunk_index}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


def plan_batches(items: Sequence[T], batch_size: int = DEFAULT_BATCH_SIZE) -> list[list[T]]:
    """Contiguous batches of at most `batch_size` items, in input order."""
    if batch_size < 1:
        raise ValidationError(f"batch_size must be >= 1, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]
