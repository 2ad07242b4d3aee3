from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field

from notebook_rag.application.dto.ingest_dto import IngestRequest, IngestResult
from notebook_rag.application.ports.audio_fetcher_port import AudioFetcherPort
from notebook_rag.application.ports.document_loader_port import DocumentLoaderPort
from notebook_rag.application.ports.embedding_port import EmbeddingPort
from notebook_rag.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from notebook_rag.application.ports.transcription_port import TranscriptionPort
from notebook_rag.application.ports.vector_store_port import VectorStorePort
from notebook_rag.application.resources import scoped_path
from notebook_rag.domain.errors import (
    EmbeddingError,
    EmptyContentError,
    ExtractionError,
    NoSourcesProvidedError,
)
from notebook_rag.domain.models import IndexedVector, RawSourceItem, SourceKind
from notebook_rag.domain.services.chunking import ChunkingParams, chunk_source
from notebook_rag.domain.services.vector_identity import (
    DEFAULT_BATCH_SIZE,
    derive_vector_id,
    plan_batches,
)

logger = logging.getLogger(__name__)

RAW_TEXT_SOURCE = "raw"


@dataclass
class IngestSources:
    """
    Application use case: PDFs, YouTube URLs and raw texts -> vectors in the store.

    Extraction may run concurrently across items; embedding and upserts run in
    order so ids and batch layout are deterministic. The first failure aborts
    the request; nothing is retried.
    """

    pdf_loader: DocumentLoaderPort
    audio_fetcher: AudioFetcherPort
    transcriber: TranscriptionPort
    embedding: EmbeddingPort
    vector_store: VectorStorePort
    chunking: ChunkingParams = field(default_factory=ChunkingParams)
    batch_size: int = DEFAULT_BATCH_SIZE
    telemetry: TelemetryPort = field(default_factory=NullTelemetry)

    async def execute(self, req: IngestRequest) -> IngestResult:
        # 1) Validate before touching any collaborator
        if req.is_empty():
            raise NoSourcesProvidedError()
        self.chunking.validate()

        warnings: list[str] = []

        # 2) Extract
        items = await self._collect(req, warnings)
        logger.info("Collected %d source items", len(items))

        # 3) Chunk + embed (one embedding call per item)
        vectors: list[IndexedVector] = []
        for item in items:
            vectors.extend(await self._vectorize(item))

        if not vectors:
            if req.require_content:
                raise EmptyContentError()
            logger.info("No content to index; vector store not contacted")
            return IngestResult(upserted=0, warnings=warnings)

        dims = {len(v.values) for v in vectors}
        if len(dims) != 1:
            raise EmbeddingError(f"mixed embedding dimensions in one request: {sorted(dims)}")

        # 4) Persist in batches
        await self.vector_store.ensure_collection(dim=dims.pop())
        batches = plan_batches(vectors, self.batch_size)
        for n, batch in enumerate(batches, start=1):
            logger.info("Upserting batch %d/%d (%d vectors)", n, len(batches), len(batch))
            await self.vector_store.upsert(batch)

        self.telemetry.incr("notebook.ingest.batches", {"count": str(len(batches))})
        self.telemetry.observe("notebook.ingest.vectors", float(len(vectors)), {})
        logger.info("Ingested %d vectors from %d items", len(vectors), len(items))
        return IngestResult(upserted=len(vectors), warnings=warnings)

    async def _collect(self, req: IngestRequest, warnings: list[str]) -> list[RawSourceItem]:
        tasks = [asyncio.create_task(self._extract_pdf(p)) for p in req.pdf_paths]
        tasks += [
            asyncio.create_task(self._extract_youtube(u, warnings)) for u in req.youtube_urls
        ]
        try:
            extracted = await asyncio.gather(*tasks)
        except Exception:
            # erster Fehler gewinnt; Geschwister-Jobs abbrechen und einsammeln
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        texts = [
            RawSourceItem(source=RAW_TEXT_SOURCE, kind=SourceKind.TEXT, text=t)
            for t in req.raw_texts
        ]
        return [*extracted, *texts]

    async def _extract_pdf(self, path: str) -> RawSourceItem:
        name = os.path.basename(path)
        try:
            payload = await self.pdf_loader.load(path)
        except ExtractionError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"PDF extraction failed for '{name}': {ex}") from ex
        logger.info("Extracted %d characters from PDF %s", len(payload.text), name)
        return RawSourceItem(source=name, kind=SourceKind.PDF, text=payload.text)

    async def _extract_youtube(self, url: str, warnings: list[str]) -> RawSourceItem:
        try:
            audio_path = await self.audio_fetcher.fetch(url)
            with scoped_path(audio_path, warnings):
                text = await self.transcriber.transcribe(audio_path)
        except ExtractionError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"YouTube extraction failed for '{url}': {ex}") from ex
        logger.info("Transcribed %d characters from %s", len(text), url)
        return RawSourceItem(source=url, kind=SourceKind.YOUTUBE, text=text)

    async def _vectorize(self, item: RawSourceItem) -> list[IndexedVector]:
        chunks = chunk_source(item, self.chunking)
        logger.debug("%s %s -> %d chunks", item.kind.value, item.source, len(chunks))
        if not chunks:
            return []

        texts = [c.text for c in chunks]
        try:
            embeddings = await self.embedding.embed_texts(texts)
        except EmbeddingError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"embedding failed for '{item.source}': {ex}") from ex
        if len(embeddings) != len(chunks):
            raise EmbeddingError(
                f"embedding provider returned {len(embeddings)} vectors for {len(chunks)} chunks"
            )

        return [
            IndexedVector(
                id=derive_vector_id(item.kind, item.source, c.index),
                values=tuple(float(x) for x in values),
                metadata={
                    "source": item.source,
                    "kind": item.kind.value,
                    "chunk_index": c.index,
                    "text": c.text,
                },
            )
            for c, values in zip(chunks, embeddings)
        ]
