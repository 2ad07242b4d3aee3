"""Application ports package.

Re-exports the ports implemented by infrastructure adapters.
"""

from notebook_rag.application.ports.audio_fetcher_port import AudioFetcherPort
from notebook_rag.application.ports.document_loader_port import DocumentLoaderPort, DocumentPayload
from notebook_rag.application.ports.embedding_port import EmbeddingPort
from notebook_rag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from notebook_rag.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from notebook_rag.application.ports.transcription_port import TranscriptionPort
from notebook_rag.application.ports.vector_store_port import (
    IndexedVector,
    StoreMatch,
    VectorStorePort,
)

__all__ = [
    "AudioFetcherPort",
    "DocumentLoaderPort",
    "DocumentPayload",
    "EmbeddingPort",
    "LLMPort",
    "ChatMessage",
    "LLMResponse",
    "NullTelemetry",
    "TelemetryPort",
    "TranscriptionPort",
    "IndexedVector",
    "StoreMatch",
    "VectorStorePort",
]
