"""Application settings with environment-driven configuration.

Why: Einzige Stelle mit Env; every other layer receives settings via
     dependency injection.
"""

import os
from dataclasses import dataclass, field


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _opt_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.
    """

    # ===== OpenAI (embeddings, chat, transcription) =====
    openai_api_key: str = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY") or os.getenv("OPEN_API_KEY", "")
    )
    openai_base_url: str = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL", ""))
    # Empty string = api.openai.com; any OpenAI-compatible server (vLLM, ...) works

    provider_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT_S", "120"))
    )

    # ===== Embedding Configuration =====
    embedding_backend: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_BACKEND", "openai").lower()
    )
    # Supported: "openai" | "hf" (local sentence-transformers)
    # Never mix backends/models within one collection: dimensions must stay uniform.

    embedding_model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    )
    hf_embedding_model: str = field(
        default_factory=lambda: os.getenv(
            "HF_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
        )
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))

    # ===== LLM Configuration =====
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))
    llm_max_tokens: int | None = field(
        default_factory=lambda: _opt_int("LLM_MAX_TOKENS")
    )

    # ===== Transcription / audio acquisition =====
    transcription_model: str = field(
        default_factory=lambda: os.getenv("TRANSCRIPTION_MODEL", "whisper-1")
    )
    ytdlp_binary: str = field(default_factory=lambda: os.getenv("YTDLP_BINARY", "yt-dlp"))
    ytdlp_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("YTDLP_TIMEOUT_S", "900"))
    )
    audio_dir: str = field(default_factory=lambda: os.getenv("AUDIO_DIR", "var/source-files"))

    # ===== Vector Store Configuration =====
    vector_backend: str = field(
        default_factory=lambda: os.getenv("VECTOR_BACKEND", "qdrant").lower()
    )
    # Supported: "qdrant" | "chroma"

    qdrant_url: str = field(
        default_factory=lambda: os.getenv("QDRANT_URL", "http://localhost:6333")
    )
    qdrant_api_key: str = field(default_factory=lambda: os.getenv("QDRANT_API_KEY", ""))
    qdrant_timeout_s: int = field(default_factory=lambda: int(os.getenv("QDRANT_TIMEOUT_S", "30")))

    chroma_dir: str = field(default_factory=lambda: os.getenv("CHROMA_DIR", "var/chroma"))

    collection: str = field(
        default_factory=lambda: os.getenv("VECTOR_COLLECTION", "notebook-knowledge")
    )

    # ===== Ingestion =====
    chunk_size: int = field(default_factory=lambda: int(os.getenv("CHUNK_SIZE", "1200")))
    chunk_overlap: int = field(default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "200")))
    upsert_batch_size: int = field(
        default_factory=lambda: int(os.getenv("UPSERT_BATCH_SIZE", "200"))
    )
    max_upload_bytes: int = field(
        default_factory=lambda: int(os.getenv("MAX_UPLOAD_BYTES", str(1024 * 1024 * 1024)))
    )

    # ===== Logging / Telemetry =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export

    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )
