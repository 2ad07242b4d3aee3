"""HTTP API for notebook ingestion, querying and index administration.

Why: Konsumierbare API ohne Business-Logik; pure Delegation. The only work
     done here is multipart parsing and staging uploads into a temp dir.
"""

import logging
import os
import tempfile
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from notebook_rag.application.dto.ingest_dto import IngestRequest
from notebook_rag.application.dto.query_dto import QueryRequest
from notebook_rag.application.resources import discard_path, scoped_path
from notebook_rag.config.composition import Container, configure_logging
from notebook_rag.domain.errors import DomainError, ValidationError

load_dotenv()

logger = logging.getLogger(__name__)

YOUTUBE_FIELDS = ("youtube_url", "youtube_urls[]", "youtube_urls")
TEXT_FIELDS = ("text", "raw_text", "raw_texts[]", "raw_texts")
PDF_CONTENT_TYPE = "application/pdf"
_COPY_CHUNK = 1024 * 1024


# Pydantic models for response validation
class IngestResponseModel(BaseModel):
    """Response model for POST /notebooks."""

    ok: bool
    upserted: int
    warnings: list[str] | None = None


class OkResponseModel(BaseModel):
    ok: bool = True


class HealthResponseModel(BaseModel):
    status: str
    service: str


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a (lazily wiring) container."""
    container = container or Container()
    configure_logging(container.settings.log_level)

    app = FastAPI(title="Notebook RAG API", version="1.0.0")
    app.state.container = container

    @app.exception_handler(DomainError)
    async def _domain_error(_request: Request, exc: DomainError) -> JSONResponse:
        status = 400 if isinstance(exc, ValidationError) else 500
        if status == 500:
            logger.error("%s: %s", type(exc).__name__, exc)
        return JSONResponse({"error": str(exc)}, status_code=status)

    @app.exception_handler(Exception)
    async def _unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error")
        return JSONResponse({"error": str(exc) or type(exc).__name__}, status_code=500)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Hello World"

    @app.get("/health", response_model=HealthResponseModel)
    async def health() -> HealthResponseModel:
        return HealthResponseModel(status="healthy", service="notebook-rag")

    @app.post("/notebooks", response_model=IngestResponseModel, response_model_exclude_none=True)
    async def ingest(request: Request) -> IngestResponseModel:
        """Multipart ingest: PDF files, YouTube URLs and raw texts in one request."""
        c: Container = request.app.state.container
        max_bytes = c.settings.max_upload_bytes
        warnings: list[str] = []
        staging = tempfile.mkdtemp(prefix="notebook-upload-")

        with scoped_path(staging, warnings):
            pdf_paths: list[str] = []
            urls: list[str] = []
            texts: list[str] = []
            async with request.form() as form:
                for key, value in form.multi_items():
                    if isinstance(value, UploadFile):
                        path = await _stage_upload(value, staging, max_bytes, warnings)
                        if path is not None:
                            pdf_paths.append(path)
                    elif key in YOUTUBE_FIELDS and value.strip():
                        urls.append(value.strip())
                    elif key in TEXT_FIELDS and value.strip():
                        texts.append(value)

            logger.info(
                "Ingest request: %d pdf(s), %d url(s), %d text(s)",
                len(pdf_paths),
                len(urls),
                len(texts),
            )
            result = await c.get_ingest_use_case().execute(
                IngestRequest(
                    pdf_paths=tuple(pdf_paths),
                    youtube_urls=tuple(urls),
                    raw_texts=tuple(texts),
                )
            )

        all_warnings = [*warnings, *result.warnings]
        return IngestResponseModel(ok=True, upserted=result.upserted, warnings=all_warnings or None)

    @app.get("/notebooks")
    async def describe(request: Request) -> dict[str, Any]:
        return await request.app.state.container.get_manage_index().describe()

    @app.delete("/notebooks", response_model=OkResponseModel)
    async def clear(request: Request) -> OkResponseModel:
        await request.app.state.container.get_manage_index().clear()
        return OkResponseModel()

    @app.get("/notebooks/query")
    async def query(
        request: Request,
        q: str | None = None,
        mode: str | None = None,
        k: str | None = None,
    ) -> dict[str, Any]:
        uc = request.app.state.container.get_query_use_case()
        answer = await uc.execute(QueryRequest(query=q or "", mode=mode or None, top_k=parse_k(k)))
        return answer.to_payload()

    return app


def parse_k(raw: str | None) -> int | None:
    """Integer `k` from the query string; empty or unparsable values are ignored."""
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.info("Ignoring non-integer k=%r", raw)
        return None


def is_pdf_upload(filename: str, content_type: str | None) -> bool:
    return filename.lower().endswith(".pdf") or (content_type or "").lower() == PDF_CONTENT_TYPE


async def _stage_upload(
    upload: UploadFile, staging_dir: str, max_bytes: int, warnings: list[str]
) -> str | None:
    """Copy one upload into its own subdirectory of the staging dir.

    The original name is kept; two parts with the same filename stay apart.

    Returns None (and records a warning) for non-PDF or oversized files.
    """
    name = os.path.basename(upload.filename or "")
    if not is_pdf_upload(name, upload.content_type):
        warnings.append(f"skipped non-PDF upload '{name or 'unnamed'}'")
        logger.warning("Skipping non-PDF upload %r (%s)", name, upload.content_type)
        return None

    # Dateiname bleibt erhalten -> gleiche Vektor-IDs bei erneutem Upload
    slot = tempfile.mkdtemp(dir=staging_dir)
    target = os.path.join(slot, name or "upload.pdf")
    written = 0
    too_large = False
    with open(target, "wb") as fh:
        while True:
            chunk = await upload.read(_COPY_CHUNK)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                too_large = True
                break
            fh.write(chunk)

    if too_large:
        discard_path(slot)
        warnings.append(f"skipped '{name}': upload exceeds {max_bytes} bytes")
        logger.warning("Skipping oversized upload %r (> %d bytes)", name, max_bytes)
        return None
    return target


app = create_app()
