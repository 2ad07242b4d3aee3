# notebook_rag/application/use_cases/query_notebook.py
from __future__ import annotations

import json
import logging
from typing import Any

from notebook_rag.application.dto.query_dto import (
    NO_CONTEXT_ANSWER,
    NO_TEXT_ANSWER,
    QueryAnswer,
    QueryRequest,
    SourceRef,
)
from notebook_rag.application.ports.embedding_port import EmbeddingPort
from notebook_rag.application.ports.llm_port import ChatMessage, LLMPort
from notebook_rag.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from notebook_rag.application.ports.vector_store_port import VectorStorePort
from notebook_rag.application.use_cases.retrieve_context import RetrieveContext
from notebook_rag.domain.errors import EmbeddingError, LLMError, ValidationError
from notebook_rag.domain.modes import QueryMode, policy_for, resolve_top_k
from notebook_rag.domain.services.context import build_context
from notebook_rag.domain.services.mode_resolution import resolve_mode
from notebook_rag.domain.services.prompts import LANGUAGE_GUARD, select_prompt

logger = logging.getLogger(__name__)


class QueryNotebook:
    """
    Application use case: resolve mode -> embed -> retrieve -> prompt -> generate.
    No I/O of its own, uses only ports; errors propagate as DomainError subclasses.
    """

    def __init__(
        self,
        embedding: EmbeddingPort,
        vector_store: VectorStorePort,
        llm: LLMPort,
        telemetry: TelemetryPort | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self.embedding = embedding
        self.vector_store = vector_store
        self.llm = llm
        self.telemetry = telemetry or NullTelemetry()
        self.max_tokens = max_tokens
        self.retriever = RetrieveContext(vector_store)

    async def execute(self, req: QueryRequest) -> QueryAnswer:
        # 1) Validate
        if not req.query or not req.query.strip():
            raise ValidationError("query parameter 'q' is required")

        # 2) Mode + breadth
        mode = resolve_mode(req.mode, req.query)
        top_k = resolve_top_k(mode, req.top_k)
        logger.info("Query mode=%s top_k=%d: %r", mode.value, top_k, req.query)
        self.telemetry.incr("notebook.query.total", {"mode": mode.value})

        # 3) Embed query
        try:
            q_vec = await self.embedding.embed_query(req.query)
        except EmbeddingError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"query embedding failed: {ex}") from ex
        if not q_vec:
            raise EmbeddingError("Failed to generate query embedding")

        # 4) Retrieve
        retrieval = await self.retriever.execute(q_vec, top_k)
        chunks = retrieval.context_chunks
        self.telemetry.observe(
            "notebook.query.context_chunks", float(len(chunks)), {"mode": mode.value}
        )
        if not chunks:
            logger.info("No relevant context found (%d raw matches)", retrieval.total_matches)
            return QueryAnswer(
                mode=mode,
                query=req.query,
                answer=NO_TEXT_ANSWER if retrieval.total_matches else NO_CONTEXT_ANSWER,
                total_matches=retrieval.total_matches,
                found_context=False,
            )

        # 5) Generate
        prompt = select_prompt(mode, build_context(chunks), req.query)
        messages = [
            ChatMessage(role="system", content=LANGUAGE_GUARD),
            ChatMessage(role="system", content=prompt.system),
            ChatMessage(role="user", content=prompt.user),
        ]
        try:
            response = await self.llm.chat(
                messages, temperature=policy_for(mode).temperature, max_tokens=self.max_tokens
            )
        except LLMError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise LLMError(f"llm generation failed: {ex}") from ex
        content = (response.text or "").strip()

        # 6) Shape
        sources = [
            SourceRef(
                source=c.source,
                kind=c.kind,
                relevance_score=c.score,
                chunk_index=c.chunk_index,
            )
            for c in chunks
        ]
        common: dict[str, Any] = dict(
            mode=mode,
            query=req.query,
            sources=sources,
            chunks_used=len(chunks),
            total_matches=retrieval.total_matches,
        )
        if mode is QueryMode.QUIZ:
            quiz = parse_quiz(content)
            return QueryAnswer(quiz=quiz, raw=None if quiz else content, **common)
        return QueryAnswer(answer=content, **common)


def parse_quiz(content: str) -> Any | None:
    """Parsed quiz JSON, or None when the model did not return valid JSON."""
    try:
        return json.loads(content)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Quiz output is not valid JSON; returning raw text")
        return None
