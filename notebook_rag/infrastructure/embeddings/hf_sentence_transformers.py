from __future__ import annotations

import asyncio
from collections.abc import Sequence
from collections.abc import Sequence as SequenceType
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, cast

from notebook_rag.application.ports.embedding_port import EmbeddingPort
from notebook_rag.domain.errors import EmbeddingError


@dataclass
class HFEmbeddingAdapter(EmbeddingPort):
    """Local Sentence-Transformers embeddings; encoding runs in a worker thread."""

    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"  # switch to "cuda" when available
    local_files_only: bool = False  # support offline deployments
    _model: Any | None = field(default=None, repr=False)

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        try:
            sentence_transformers = import_module("sentence_transformers")
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError("sentence-transformers not installed.") from ex
        try:
            self._model = sentence_transformers.SentenceTransformer(
                self.model_name,
                device=self.device,
                local_files_only=self.local_files_only,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(
                f"Failed to load embedding model '{self.model_name}': {ex}"
            ) from ex
        return self._model

    def _encode(self, inputs: str | list[str]) -> Any:
        model = self._ensure_model()
        return model.encode(
            inputs,
            normalize_embeddings=True,
            convert_to_numpy=True,
            show_progress_bar=False,
        )

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            raw_vectors = await asyncio.to_thread(self._encode, list(texts))
        except EmbeddingError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding texts failed: {ex}") from ex
        vectors = cast(SequenceType[SequenceType[float]], raw_vectors)
        return [list(map(float, vec)) for vec in vectors]

    async def embed_query(self, text: str) -> list[float]:
        try:
            raw_vector = await asyncio.to_thread(self._encode, text)
        except EmbeddingError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding query failed: {ex}") from ex
        vector = cast(SequenceType[float], raw_vector)
        return [float(x) for x in vector]
