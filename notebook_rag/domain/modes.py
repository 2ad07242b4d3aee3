"""Query modes and the per-mode policy table.

Adding a mode means adding an enum member, a row in MODE_POLICIES and a
prompt template in domain/services/prompts.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_TOP_K = 1
MAX_TOP_K = 100


class QueryMode(str, Enum):
    ANSWER = "answer"
    SUMMARY = "summary"
    OVERVIEW = "overview"
    ANALYSIS = "analysis"
    QUIZ = "quiz"

    @classmethod
    def parse(cls, value: str | None) -> QueryMode | None:
        """Case-insensitive lookup; None for missing or unknown names."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ModePolicy:
    default_top_k: int
    temperature: float


MODE_POLICIES: dict[QueryMode, ModePolicy] = {
    QueryMode.ANSWER: ModePolicy(default_top_k=6, temperature=0.2),
    QueryMode.SUMMARY: ModePolicy(default_top_k=24, temperature=0.2),
    QueryMode.OVERVIEW: ModePolicy(default_top_k=24, temperature=0.2),
    QueryMode.ANALYSIS: ModePolicy(default_top_k=24, temperature=0.2),
    QueryMode.QUIZ: ModePolicy(default_top_k=40, temperature=0.4),
}


def policy_for(mode: QueryMode) -> ModePolicy:
    return MODE_POLICIES[mode]


def resolve_top_k(mode: QueryMode, requested: int | None = None) -> int:
    """Retrieval breadth: the mode default, or the caller's value clamped to [1, 100]."""
    if requested is None:
        return policy_for(mode).default_top_k
    return max(MIN_TOP_K, min(MAX_TOP_K, int(requested)))
