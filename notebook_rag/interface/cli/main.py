"""Command-line interface for the notebook.

Why: Operative Tasks (ingest, query, stats, clear) ohne HTTP-Server;
     pure Delegation an die Use Cases, Ausgabe als JSON.
"""

import argparse
import asyncio
import json
import sys
from typing import Any

from dotenv import load_dotenv

from notebook_rag.application.dto.ingest_dto import IngestRequest
from notebook_rag.application.dto.query_dto import QueryRequest
from notebook_rag.config.composition import Container, configure_logging
from notebook_rag.domain.errors import DomainError
from notebook_rag.domain.modes import QueryMode
from notebook_rag.infrastructure.parsing.pdf_text_extractor import PlainTextLoaderAdapter


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


async def cmd_ingest(container: Container, args: argparse.Namespace) -> dict[str, Any]:
    texts = list(args.text)
    loader = PlainTextLoaderAdapter()
    for path in args.text_file:
        texts.append((await loader.load(path)).text)

    result = await container.get_ingest_use_case().execute(
        IngestRequest(
            pdf_paths=tuple(args.pdf),
            youtube_urls=tuple(args.youtube),
            raw_texts=tuple(texts),
        )
    )
    body: dict[str, Any] = {"ok": True, "upserted": result.upserted}
    if result.warnings:
        body["warnings"] = result.warnings
    return body


async def cmd_query(container: Container, args: argparse.Namespace) -> dict[str, Any]:
    answer = await container.get_query_use_case().execute(
        QueryRequest(query=args.question, mode=args.mode, top_k=args.k)
    )
    return answer.to_payload()


async def cmd_stats(container: Container, _args: argparse.Namespace) -> dict[str, Any]:
    return await container.get_manage_index().describe()


async def cmd_clear(container: Container, _args: argparse.Namespace) -> dict[str, Any]:
    await container.get_manage_index().clear()
    return {"ok": True}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notebook-rag",
        description="Notebook RAG: ingest PDFs, YouTube audio and text, then ask questions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ingest
    p_ingest = subparsers.add_parser("ingest", help="Index PDFs, YouTube URLs and raw text")
    p_ingest.add_argument("--pdf", action="append", default=[], help="PDF file (repeatable)")
    p_ingest.add_argument("--youtube", action="append", default=[], help="YouTube URL (repeatable)")
    p_ingest.add_argument("--text", action="append", default=[], help="Raw text (repeatable)")
    p_ingest.add_argument(
        "--text-file", action="append", default=[], help="UTF-8 text file indexed as raw text"
    )
    p_ingest.set_defaults(handler=cmd_ingest)

    # query
    p_query = subparsers.add_parser("query", help="Ask the notebook")
    p_query.add_argument("question")
    p_query.add_argument(
        "--mode", choices=[m.value for m in QueryMode], default=None, help="Force a query mode"
    )
    p_query.add_argument("--k", type=int, default=None, help="Number of chunks to retrieve")
    p_query.set_defaults(handler=cmd_query)

    # stats / clear
    subparsers.add_parser("stats", help="List or describe the index").set_defaults(
        handler=cmd_stats
    )
    subparsers.add_parser("clear", help="Delete every vector in the index").set_defaults(
        handler=cmd_clear
    )
    return parser


def main(argv: list[str] | None = None, container: Container | None = None) -> int:
    """Entry point; returns the process exit code (0 ok, 1 domain error, 2 usage)."""
    args = build_parser().parse_args(argv)

    load_dotenv()
    container = container or Container()
    configure_logging(container.settings.log_level)

    try:
        payload = asyncio.run(args.handler(container, args))
    except DomainError as ex:
        print(json.dumps({"error": str(ex), "type": type(ex).__name__}), file=sys.stderr)
        return 1
    _print_json(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
