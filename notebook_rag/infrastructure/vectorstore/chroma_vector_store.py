from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, cast

from notebook_rag.application.ports.vector_store_port import (
    IndexedVector,
    StoreMatch,
    VectorStorePort,
)
from notebook_rag.domain.errors import VectorStoreError

LIST_LIMIT = 1000


@dataclass
class ChromaVectorStoreAdapter(VectorStorePort):
    """Local persistent Chroma collection; the blocking client runs in a worker thread."""

    persist_dir: str = "var/chroma"
    collection: str = "notebook-knowledge"
    _client: Any | None = field(default=None, repr=False)
    _coll: Any | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._client is not None:
            return
        try:
            chromadb = import_module("chromadb")
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError("chromadb not installed.") from ex
        os.makedirs(self.persist_dir, exist_ok=True)
        try:
            self._client = chromadb.PersistentClient(path=self.persist_dir)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to init Chroma at '{self.persist_dir}': {ex}") from ex

    def _collection(self) -> Any:
        if self._coll is None:
            if self._client is None:
                raise VectorStoreError("Chroma client not initialized.")
            self._coll = self._client.get_or_create_collection(
                name=self.collection,
                metadata={"hnsw:space": "cosine"},
            )
        return self._coll

    async def ensure_collection(self, dim: int) -> None:
        del dim  # Chroma collections are dimensionless; embeddings carry their own size
        try:
            await asyncio.to_thread(self._collection)
        except VectorStoreError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to ensure collection '{self.collection}': {ex}") from ex

    async def upsert(self, vectors: Sequence[IndexedVector]) -> None:
        def _upsert() -> None:
            self._collection().upsert(
                ids=[v.id for v in vectors],
                embeddings=[list(v.values) for v in vectors],
                metadatas=[dict(v.metadata) for v in vectors],
                documents=[str(v.metadata.get("text", "")) for v in vectors],
            )

        try:
            await asyncio.to_thread(_upsert)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Upsert failed: {ex}") from ex

    async def query(self, vector: Sequence[float], top_k: int) -> list[StoreMatch]:
        def _query() -> dict[str, list[list[Any]]]:
            return cast(
                dict[str, list[list[Any]]],
                self._collection().query(
                    query_embeddings=[list(vector)],
                    n_results=top_k,
                    include=["metadatas", "distances"],
                ),
            )

        try:
            result = await asyncio.to_thread(_query)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Search failed: {ex}") from ex

        ids = (result.get("ids") or [[]])[0]
        metadatas = (result.get("metadatas") or [[]])[0]
        distances = (result.get("distances") or [[]])[0]

        matches: list[StoreMatch] = []
        for idx, chunk_id in enumerate(ids):
            distance = float(distances[idx]) if idx < len(distances) else None
            metadata = metadatas[idx] if idx < len(metadatas) else None
            matches.append(
                StoreMatch(
                    id=str(chunk_id),
                    # Chroma liefert Distanz (kleiner = besser)
                    score=None if distance is None else 1.0 - distance,
                    metadata=metadata,
                )
            )
        return matches

    async def delete_all(self) -> None:
        def _drop() -> None:
            if self._client is None:
                raise VectorStoreError("Chroma client not initialized.")
            existing = {getattr(c, "name", c) for c in self._client.list_collections()}
            if self.collection in existing:
                self._client.delete_collection(self.collection)
            self._coll = None

        try:
            await asyncio.to_thread(_drop)
        except VectorStoreError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Delete failed: {ex}") from ex

    async def describe(self) -> dict[str, Any]:
        def _list() -> list[str]:
            got = self._collection().get(limit=LIST_LIMIT, include=[])
            return [str(i) for i in got.get("ids", [])]

        try:
            return {"listed": await asyncio.to_thread(_list)}
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Listing failed: {ex}") from ex
