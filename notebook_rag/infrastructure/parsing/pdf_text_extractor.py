from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from notebook_rag.application.ports.document_loader_port import DocumentLoaderPort, DocumentPayload
from notebook_rag.domain.errors import ExtractionError

_BLANK_RUNS = re.compile(r"\n{2,}")


@dataclass
class PDFTextExtractorAdapter(DocumentLoaderPort):
    async def load(self, path: str) -> DocumentPayload:  # type: ignore[override]
        # pypdf is synchronous and CPU-bound
        return await asyncio.to_thread(self.load_sync, path)

    def load_sync(self, path: str) -> DocumentPayload:
        try:
            from pypdf import PdfReader  # lazy import to avoid hard dependency in tests
        except Exception as ex:  # pragma: no cover
            raise ExtractionError("pypdf is not installed") from ex

        try:
            reader = PdfReader(path)
            pages: list[str] = []
            for p in reader.pages:
                pages.append(p.extract_text() or "")
            text = _BLANK_RUNS.sub("\n", "\n".join(pages)).strip()
            title = reader.metadata.title if getattr(reader, "metadata", None) else None
            return DocumentPayload(text=text, title=title, source_path=path)
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"PDF parse failed: {ex}") from ex


@dataclass
class PlainTextLoaderAdapter(DocumentLoaderPort):
    """Reads UTF-8 text files; used by the CLI for --text-file inputs."""

    async def load(self, path: str) -> DocumentPayload:  # type: ignore[override]
        return await asyncio.to_thread(self.load_sync, path)

    def load_sync(self, path: str) -> DocumentPayload:
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read().strip()
            return DocumentPayload(text=text, title=None, source_path=path)
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"TXT load failed: {ex}") from ex
