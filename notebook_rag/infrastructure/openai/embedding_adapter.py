from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from notebook_rag.application.ports.embedding_port import EmbeddingPort
from notebook_rag.domain.errors import EmbeddingError
from notebook_rag.infrastructure.openai.client import OpenAIConfig, build_async_client


@dataclass
class OpenAIEmbeddingAdapter(EmbeddingPort):
    """Embeddings via the OpenAI embeddings endpoint (text-embedding-3-small: 1536-d)."""

    cfg: OpenAIConfig
    model: str = "text-embedding-3-small"
    _client: Any | None = field(default=None, init=False, repr=False)

    def _ensure_client(self) -> Any:
        if self._client is None:
            if not self.cfg.api_key:
                raise EmbeddingError("Missing OpenAI API key. Set OPENAI_API_KEY in env/.env.")
            try:
                self._client = build_async_client(self.cfg)
            except Exception as ex:  # noqa: BLE001
                raise EmbeddingError(f"OpenAI client init failed: {ex}") from ex
        return self._client

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        client = self._ensure_client()
        try:
            resp: Any = await client.embeddings.create(model=self.model, input=list(texts))
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding texts failed: {ex}") from ex
        data = sorted(resp.data, key=lambda d: getattr(d, "index", 0))
        return [[float(x) for x in d.embedding] for d in data]

    async def embed_query(self, text: str) -> list[float]:
        vectors = await self.embed_texts([text])
        if not vectors:
            raise EmbeddingError("Failed to generate query embedding")
        return vectors[0]
