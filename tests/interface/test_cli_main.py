import json

import pytest

from notebook_rag.application.dto.ingest_dto import IngestResult
from notebook_rag.application.dto.query_dto import QueryAnswer
from notebook_rag.config.settings import AppSettings
from notebook_rag.domain.errors import NoSourcesProvidedError
from notebook_rag.domain.modes import QueryMode
from notebook_rag.interface.cli.main import build_parser, main


class FakeIngest:
    def __init__(self) -> None:
        self.requests: list = []

    async def execute(self, req):
        self.requests.append(req)
        if req.is_empty():
            raise NoSourcesProvidedError()
        return IngestResult(upserted=3, warnings=["cleanup failed for x.mp3: busy"])


class FakeQuery:
    def __init__(self) -> None:
        self.requests: list = []

    async def execute(self, req):
        self.requests.append(req)
        return QueryAnswer(mode=QueryMode.SUMMARY, query=req.query, answer="- point")


class FakeIndex:
    def __init__(self) -> None:
        self.cleared = False

    async def describe(self):
        return {"stats": {"points_count": 3}}

    async def clear(self):
        self.cleared = True


class FakeContainer:
    def __init__(self) -> None:
        self.settings = AppSettings()
        self.ingest, self.query, self.index = FakeIngest(), FakeQuery(), FakeIndex()

    def get_ingest_use_case(self):
        return self.ingest

    def get_query_use_case(self):
        return self.query

    def get_manage_index(self):
        return self.index


def test_parser_collects_repeated_sources():
    args = build_parser().parse_args(
        ["ingest", "--pdf", "a.pdf", "--pdf", "b.pdf", "--youtube", "https://youtu.be/x", "--text", "hi"]
    )
    assert args.pdf == ["a.pdf", "b.pdf"]
    assert args.youtube == ["https://youtu.be/x"]
    assert args.text == ["hi"]


def test_unknown_mode_is_a_usage_error():
    with pytest.raises(SystemExit) as ei:
        build_parser().parse_args(["query", "x", "--mode", "poem"])
    assert ei.value.code == 2


def test_ingest_prints_json(capsys, tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("from a file", encoding="utf-8")
    c = FakeContainer()

    code = main(["ingest", "--text", "hi", "--text-file", str(notes)], container=c)

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "ok": True,
        "upserted": 3,
        "warnings": ["cleanup failed for x.mp3: busy"],
    }
    assert c.ingest.requests[0].raw_texts == ("hi", "from a file")


def test_domain_error_exits_with_1(capsys):
    code = main(["ingest"], container=FakeContainer())
    assert code == 1
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["error"] == "no valid sources provided"


def test_query_stats_and_clear(capsys):
    c = FakeContainer()
    assert main(["query", "Summarize it", "--k", "8"], container=c) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["mode"] == "summary"
    assert c.query.requests[0].top_k == 8

    assert main(["stats"], container=c) == 0
    assert json.loads(capsys.readouterr().out) == {"stats": {"points_count": 3}}

    assert main(["clear"], container=c) == 0
    assert c.index.cleared
