from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from notebook_rag.application.ports.vector_store_port import VectorStorePort
from notebook_rag.domain.errors import ValidationError
from notebook_rag.domain.models import ContextChunk, StoreMatch
from notebook_rag.domain.services.context import to_context_chunks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrievalResult:
    matches: list[StoreMatch] = field(default_factory=list)
    context_chunks: list[ContextChunk] = field(default_factory=list)

    @property
    def total_matches(self) -> int:
        return len(self.matches)


@dataclass
class RetrieveContext:
    """Top-k nearest neighbours -> text-bearing context chunks, best first."""

    vector_store: VectorStorePort

    async def execute(self, query_vector: Sequence[float], top_k: int) -> RetrievalResult:
        if top_k < 1:
            raise ValidationError("top_k must be > 0")
        matches = list(await self.vector_store.query(query_vector, top_k))
        chunks = to_context_chunks(matches)
        if len(chunks) < len(matches):
            logger.warning("Dropped %d matches without text metadata", len(matches) - len(chunks))
        return RetrievalResult(matches=matches, context_chunks=chunks)
