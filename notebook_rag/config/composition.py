"""Composition root: settings -> adapters -> use cases.

Why: Einzige Stelle mit Wiring; all other layers receive their collaborators
     by injection and never build clients themselves.
"""

import logging

from notebook_rag.application.ports.audio_fetcher_port import AudioFetcherPort
from notebook_rag.application.ports.embedding_port import EmbeddingPort
from notebook_rag.application.ports.llm_port import LLMPort
from notebook_rag.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from notebook_rag.application.ports.transcription_port import TranscriptionPort
from notebook_rag.application.ports.vector_store_port import VectorStorePort
from notebook_rag.application.use_cases.ingest_sources import IngestSources
from notebook_rag.application.use_cases.manage_index import ManageIndex
from notebook_rag.application.use_cases.query_notebook import QueryNotebook
from notebook_rag.config.settings import AppSettings
from notebook_rag.domain.errors import ValidationError
from notebook_rag.domain.services.chunking import ChunkingParams
from notebook_rag.infrastructure.audio.yt_dlp_fetcher import YtDlpAudioFetcher
from notebook_rag.infrastructure.openai.chat_adapter import OpenAIChatAdapter
from notebook_rag.infrastructure.openai.client import OpenAIConfig
from notebook_rag.infrastructure.openai.embedding_adapter import OpenAIEmbeddingAdapter
from notebook_rag.infrastructure.parsing.pdf_text_extractor import PDFTextExtractorAdapter
from notebook_rag.infrastructure.transcription.whisper_adapter import (
    WhisperTranscriptionAdapter,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logger setup for the HTTP app and the CLI."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # httpx logs every provider request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_openai_config(settings: AppSettings) -> OpenAIConfig:
    return OpenAIConfig(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url or None,
        timeout_s=settings.provider_timeout_s,
    )


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    backend = settings.embedding_backend
    if backend == "openai":
        return OpenAIEmbeddingAdapter(
            cfg=build_openai_config(settings), model=settings.embedding_model
        )
    if backend == "hf":
        from notebook_rag.infrastructure.embeddings.hf_sentence_transformers import (
            HFEmbeddingAdapter,
        )

        return HFEmbeddingAdapter(
            model_name=settings.hf_embedding_model,
            device=settings.embedding_device,
        )
    raise ValidationError(f"Unknown EMBEDDING_BACKEND '{backend}' (expected openai|hf)")


def build_vector_store(settings: AppSettings) -> VectorStorePort:
    backend = settings.vector_backend

    if backend == "qdrant":
        from notebook_rag.infrastructure.vectorstore.qdrant_adapter import (
            QdrantConfig,
            QdrantVectorStoreAdapter,
        )

        return QdrantVectorStoreAdapter(
            QdrantConfig(
                url=settings.qdrant_url,
                collection=settings.collection,
                api_key=settings.qdrant_api_key or None,
                timeout_s=settings.qdrant_timeout_s,
            )
        )

    if backend == "chroma":
        from notebook_rag.infrastructure.vectorstore.chroma_vector_store import (
            ChromaVectorStoreAdapter,
        )

        return ChromaVectorStoreAdapter(
            persist_dir=settings.chroma_dir,
            collection=settings.collection,
        )

    raise ValidationError(f"Unknown VECTOR_BACKEND '{backend}' (expected qdrant|chroma)")


def build_llm(settings: AppSettings) -> LLMPort:
    return OpenAIChatAdapter(cfg=build_openai_config(settings), model=settings.llm_model)


def build_transcriber(settings: AppSettings) -> TranscriptionPort:
    return WhisperTranscriptionAdapter(
        cfg=build_openai_config(settings), model=settings.transcription_model
    )


def build_audio_fetcher(settings: AppSettings) -> AudioFetcherPort:
    return YtDlpAudioFetcher(
        output_dir=settings.audio_dir,
        binary=settings.ytdlp_binary,
        timeout_s=settings.ytdlp_timeout_s,
    )


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    """OpenTelemetry when enabled, otherwise a sink that drops everything."""
    if not settings.telemetry_enabled:
        return NullTelemetry()
    from notebook_rag.infrastructure.telemetry.otel_adapter import (
        OpenTelemetryAdapter,
        OtelConfig,
    )

    return OpenTelemetryAdapter(
        OtelConfig(
            otlp_endpoint=settings.otlp_endpoint or None,
            environment=settings.telemetry_environment,
        )
    )


class Container:
    """Lazily wired adapters and use cases for one process.

    Adapters are built on first use and then shared, so the HTTP app and the
    CLI reuse one provider client per process.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self.settings = settings or AppSettings()
        self._embedding: EmbeddingPort | None = None
        self._vector_store: VectorStorePort | None = None
        self._llm: LLMPort | None = None
        self._telemetry: TelemetryPort | None = None

    # ===== Adapters =====

    def get_embedding(self) -> EmbeddingPort:
        if self._embedding is None:
            self._embedding = build_embedding(self.settings)
        return self._embedding

    def get_vector_store(self) -> VectorStorePort:
        if self._vector_store is None:
            self._vector_store = build_vector_store(self.settings)
        return self._vector_store

    def get_llm(self) -> LLMPort:
        if self._llm is None:
            self._llm = build_llm(self.settings)
        return self._llm

    def get_telemetry(self) -> TelemetryPort:
        if self._telemetry is None:
            self._telemetry = build_telemetry(self.settings)
        return self._telemetry

    # ===== Use Cases =====

    def get_ingest_use_case(self) -> IngestSources:
        s = self.settings
        return IngestSources(
            pdf_loader=PDFTextExtractorAdapter(),
            audio_fetcher=build_audio_fetcher(s),
            transcriber=build_transcriber(s),
            embedding=self.get_embedding(),
            vector_store=self.get_vector_store(),
            chunking=ChunkingParams(size=s.chunk_size, overlap=s.chunk_overlap),
            batch_size=s.upsert_batch_size,
            telemetry=self.get_telemetry(),
        )

    def get_query_use_case(self) -> QueryNotebook:
        return QueryNotebook(
            embedding=self.get_embedding(),
            vector_store=self.get_vector_store(),
            llm=self.get_llm(),
            telemetry=self.get_telemetry(),
            max_tokens=self.settings.llm_max_tokens,
        )

    def get_manage_index(self) -> ManageIndex:
        return ManageIndex(vector_store=self.get_vector_store())


def build_ingest_use_case(settings: AppSettings | None = None) -> IngestSources:
    return Container(settings).get_ingest_use_case()


def build_query_use_case(settings: AppSettings | None = None) -> QueryNotebook:
    return Container(settings).get_query_use_case()


def build_manage_index(settings: AppSettings | None = None) -> ManageIndex:
    return Container(settings).get_manage_index()
