import json

import pytest

from notebook_rag.application.dto.query_dto import (
    NO_CONTEXT_ANSWER,
    NO_TEXT_ANSWER,
    QueryRequest,
)
from notebook_rag.application.ports.llm_port import LLMResponse
from notebook_rag.application.use_cases.query_notebook import QueryNotebook, parse_quiz
from notebook_rag.domain.errors import EmbeddingError, LLMError, ValidationError
from notebook_rag.domain.models import StoreMatch
from notebook_rag.domain.modes import QueryMode
from notebook_rag.domain.services.prompts import LANGUAGE_GUARD


class FakeEmbedding:
    def __init__(self, vector=None, fail: bool = False) -> None:
        self.vector = [0.1, 0.2, 0.3] if vector is None else vector
        self.fail = fail
        self.queries: list[str] = []

    async def embed_texts(self, texts):
        return [self.vector for _ in texts]

    async def embed_query(self, text):
        self.queries.append(text)
        if self.fail:
            raise RuntimeError("provider down")
        return self.vector


class FakeStore:
    def __init__(self, matches=None) -> None:
        self.matches = matches or []
        self.top_ks: list[int] = []

    async def query(self, vector, top_k):
        self.top_ks.append(top_k)
        return self.matches


class FakeLLM:
    def __init__(self, text: str = "  The answer [#1].  ", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[dict] = []

    async def chat(self, messages, temperature=0.2, max_tokens=None):
        self.calls.append(
            {"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.fail:
            raise RuntimeError("rate limited")
        return LLMResponse(text=self.text)


def _match(text, score, source="notes.pdf", idx=0):
    return StoreMatch(
        id=f"id-{idx}",
        score=score,
        metadata={"text": text, "source": source, "kind": "pdf", "chunk_index": idx},
    )


def _uc(store=None, llm=None, embedding=None, **kw) -> QueryNotebook:
    return QueryNotebook(
        embedding=embedding or FakeEmbedding(),
        vector_store=store or FakeStore([_match("alpha", 0.4, idx=0), _match("beta", 0.9, idx=1)]),
        llm=llm or FakeLLM(),
        **kw,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   "])
async def test_blank_query_is_rejected(query):
    with pytest.raises(ValidationError, match="query parameter 'q' is required"):
        await _uc().execute(QueryRequest(query=query))


@pytest.mark.asyncio
async def test_answer_mode_builds_prompt_and_sources():
    llm, store = FakeLLM(), FakeStore([_match("alpha", 0.4, idx=0), _match("beta", 0.9, idx=1)])
    result = await _uc(store=store, llm=llm).execute(QueryRequest(query="What is beta?"))

    assert result.mode is QueryMode.ANSWER
    assert result.answer == "The answer [#1]."
    assert store.top_ks == [6]

    call = llm.calls[0]
    assert call["temperature"] == pytest.approx(0.2)
    roles = [m.role for m in call["messages"]]
    assert roles == ["system", "system", "user"]
    assert call["messages"][0].content == LANGUAGE_GUARD
    # bester Treffer zuerst
    assert "[#1] beta\n\n[#2] alpha" in call["messages"][2].content
    assert "What is beta?" in call["messages"][2].content

    payload = result.to_payload()
    assert payload["sources"] == [
        {"source": "notes.pdf", "kind": "pdf", "relevance_score": 0.9, "chunk_index": 1},
        {"source": "notes.pdf", "kind": "pdf", "relevance_score": 0.4, "chunk_index": 0},
    ]
    assert payload["chunks_used"] == 2
    assert payload["total_matches"] == 2
    assert payload["query"] == "What is beta?"


@pytest.mark.asyncio
async def test_no_context_returns_apology_without_calling_llm():
    llm = FakeLLM()
    store = FakeStore([])
    result = await _uc(store=store, llm=llm).execute(QueryRequest(query="anything?"))

    assert llm.calls == []
    assert result.found_context is False
    assert result.to_payload() == {
        "mode": "answer",
        "answer": NO_CONTEXT_ANSWER,
        "sources": [],
        "query": "anything?",
    }


@pytest.mark.asyncio
async def test_matches_without_text_get_their_own_apology():
    llm = FakeLLM()
    store = FakeStore([StoreMatch(id="x", score=0.9, metadata={"source": "no text"})])
    result = await _uc(store=store, llm=llm).execute(QueryRequest(query="anything?"))

    assert llm.calls == []
    assert result.total_matches == 1
    assert result.to_payload()["answer"] == NO_TEXT_ANSWER
    assert result.to_payload()["sources"] == []


@pytest.mark.asyncio
async def test_explicit_mode_and_top_k_are_honoured():
    store, llm = FakeStore([_match("alpha", 0.5)]), FakeLLM()
    result = await _uc(store=store, llm=llm).execute(
        QueryRequest(query="What is X?", mode="Summary", top_k=500)
    )
    assert result.mode is QueryMode.SUMMARY
    assert store.top_ks == [100]
    # Frage landet nicht im Summary-Prompt
    assert "What is X?" not in llm.calls[0]["messages"][2].content


@pytest.mark.asyncio
async def test_quiz_mode_parses_json():
    quiz = {"questions": [{"question": "Q?", "options": ["a", "b", "c", "d"], "answerIndex": 1, "explanation": "e"}]}
    llm, store = FakeLLM(text=json.dumps(quiz)), FakeStore([_match("alpha", 0.5)])
    result = await _uc(store=store, llm=llm).execute(QueryRequest(query="quiz me"))

    assert result.mode is QueryMode.QUIZ
    assert store.top_ks == [40]
    assert llm.calls[0]["temperature"] == pytest.approx(0.4)
    payload = result.to_payload()
    assert payload["quiz"] == quiz
    assert "raw" not in payload and "answer" not in payload


@pytest.mark.asyncio
async def test_quiz_mode_falls_back_to_raw_text():
    llm = FakeLLM(text="Sure! Here is your quiz: ...")
    result = await _uc(llm=llm).execute(QueryRequest(query="x", mode="quiz"))

    payload = result.to_payload()
    assert payload["quiz"] is None
    assert payload["raw"] == "Sure! Here is your quiz: ..."


def test_parse_quiz():
    assert parse_quiz('{"questions": []}') == {"questions": []}
    assert parse_quiz("not json") is None


@pytest.mark.asyncio
async def test_max_tokens_is_forwarded():
    llm = FakeLLM()
    await _uc(llm=llm, max_tokens=256).execute(QueryRequest(query="What?"))
    assert llm.calls[0]["max_tokens"] == 256


@pytest.mark.asyncio
async def test_embedding_failures_surface_as_embedding_error():
    with pytest.raises(EmbeddingError):
        await _uc(embedding=FakeEmbedding(fail=True)).execute(QueryRequest(query="What?"))
    with pytest.raises(EmbeddingError, match="Failed to generate query embedding"):
        await _uc(embedding=FakeEmbedding(vector=[])).execute(QueryRequest(query="What?"))


@pytest.mark.asyncio
async def test_llm_failures_surface_as_llm_error():
    with pytest.raises(LLMError):
        await _uc(llm=FakeLLM(fail=True)).execute(QueryRequest(query="What?"))
