"""Prompt templates per query mode.

Only the answer prompt sees the user's question; summary, overview, analysis
and quiz instruct from the context alone, so they stay reproducible for the
same corpus regardless of how the request was phrased.
"""

from __future__ import annotations

from collections.abc import Callable

from notebook_rag.domain.models import PromptPair
from notebook_rag.domain.modes import QueryMode

LANGUAGE_GUARD = (
    "When no language specified, always return the answer in english. "
    "Do not include any other text in the response."
)

QUIZ_QUESTION_COUNT = 5


def _answer(context: str, question: str) -> PromptPair:
    return PromptPair(
        system=(
            "Ground all factual claims in the provided context. You may adapt, translate, "
            "and teach using the user's requested language or phonetics (e.g., Portuguese "
            "sound analogies), even if those didactic examples are not verbatim in the "
            "context. If the context lacks the factual information needed, say you don't know."
        ),
        user=f"Context:\n{context}\n\nQuestion: {question}",
    )


def _summary(context: str, _question: str) -> PromptPair:
    return PromptPair(
        system=(
            "Write a clear, unbiased summary using only the provided context. "
            "Focus on key points, avoid speculation."
        ),
        user=f"Context:\n{context}\n\nTask: Produce a concise summary (5-10 bullet points).",
    )


def _overview(context: str, _question: str) -> PromptPair:
    return PromptPair(
        system=(
            "Provide a high-level overview using only the provided context. "
            "Cover main themes and structure."
        ),
        user=(
            f"Context:\n{context}\n\n"
            "Task: Provide a high-level overview (short paragraphs + bullets)."
        ),
    )


def _analysis(context: str, _question: str) -> PromptPair:
    return PromptPair(
        system=(
            "Analyze the content using only the provided context. "
            "Identify claims, evidence, implications, and gaps."
        ),
        user=(
            f"Context:\n{context}\n\n"
            "Task: Provide a structured analysis (claims, evidence, implications, caveats)."
        ),
    )


def _quiz(context: str, _question: str) -> PromptPair:
    return PromptPair(
        system=(
            "Create a quiz strictly from the provided context. Do not invent facts. "
            "Return only valid JSON."
        ),
        user=(
            f"Context:\n{context}\n\n"
            f"Task: Generate exactly {QUIZ_QUESTION_COUNT} diverse multiple-choice questions. "
            "Each item must include: question (string), options (array of 4 strings), "
            "answerIndex (0-3), and explanation (string). "
            'Return JSON in the shape {"questions": Array<...>}.'
        ),
    )


PROMPT_BUILDERS: dict[QueryMode, Callable[[str, str], PromptPair]] = {
    QueryMode.ANSWER: _answer,
    QueryMode.SUMMARY: _summary,
    QueryMode.OVERVIEW: _overview,
    QueryMode.ANALYSIS: _analysis,
    QueryMode.QUIZ: _quiz,
}


def select_prompt(mode: QueryMode, context: str, question: str = "") -> PromptPair:
    return PROMPT_BUILDERS[mode](context, question)
