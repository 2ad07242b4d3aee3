from __future__ import annotations

import re

from notebook_rag.domain.modes import QueryMode

# Substring heuristic, kept as-is for compatibility: "test" also fires inside
# proper nouns, and that is accepted behaviour.
_GENERAL_INTENT = re.compile(
    r"summary|summarize|overview|analy(s|z)e|analysis|quiz|questions|flashcards|test",
    re.IGNORECASE,
)

# First match wins; quiz goes first because its keywords are the most deliberate.
_KEYWORD_RULES: tuple[tuple[tuple[str, ...], QueryMode], ...] = (
    (("quiz", "question"), QueryMode.QUIZ),
    (("overview",), QueryMode.OVERVIEW),
    (("summar",), QueryMode.SUMMARY),
    (("analy",), QueryMode.ANALYSIS),
)


def infer_mode(query_text: str) -> QueryMode:
    """Mine the query's own phrasing for an intent; answer is the fallback."""
    lowered = query_text.lower()
    for keywords, mode in _KEYWORD_RULES:
        if any(k in lowered for k in keywords):
            return mode
    if _GENERAL_INTENT.search(query_text):
        return QueryMode.SUMMARY
    return QueryMode.ANSWER


def resolve_mode(explicit_mode: str | None, query_text: str) -> QueryMode:
    """Explicit (case-insensitive) mode wins; unknown names fall back to inference."""
    explicit = QueryMode.parse(explicit_mode)
    if explicit is not None:
        return explicit
    return infer_mode(query_text)
