# notebook_rag/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from notebook_rag.domain.modes import QueryMode

NO_CONTEXT_ANSWER = "I couldn't find any relevant information in my knowledge base to respond."
NO_TEXT_ANSWER = "I found some results but couldn't extract the text content to respond."


@dataclass(frozen=True)
class QueryRequest:
    """
    DTO for querying the notebook.

    - query: user question (non-empty)
    - mode:  optional explicit mode name; unknown names are ignored
    - top_k: optional retrieval breadth, clamped to [1, 100]; None = mode default
    """

    query: str
    mode: str | None = None
    top_k: int | None = None


@dataclass(frozen=True)
class SourceRef:
    source: str | None
    kind: str | None
    relevance_score: float | None
    chunk_index: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "kind": self.kind,
            "relevance_score": self.relevance_score,
            "chunk_index": self.chunk_index,
        }


@dataclass(frozen=True)
class QueryAnswer:
    """Shaped response of one query.

    Exactly one of `answer` / `quiz` is meaningful: quiz mode fills `quiz`
    (or `raw` when the model output was not valid JSON), all other modes fill
    `answer`. `found_context` is False for the no-context apology.
    """

    mode: QueryMode
    query: str
    answer: str | None = None
    quiz: Any | None = None
    raw: str | None = None
    sources: list[SourceRef] = field(default_factory=list)
    chunks_used: int = 0
    total_matches: int = 0
    found_context: bool = True

    def to_payload(self) -> dict[str, Any]:
        sources = [s.to_dict() for s in self.sources]
        if not self.found_context:
            return {
                "mode": self.mode.value,
                "answer": self.answer,
                "sources": [],
                "query": self.query,
            }
        payload: dict[str, Any] = {"mode": self.mode.value}
        if self.mode is QueryMode.QUIZ:
            payload["quiz"] = self.quiz
            if self.raw is not None:
                payload["raw"] = self.raw
        else:
            payload["answer"] = self.answer
        payload.update(
            sources=sources,
            query=self.query,
            chunks_used=self.chunks_used,
            total_matches=self.total_matches,
        )
        return payload
