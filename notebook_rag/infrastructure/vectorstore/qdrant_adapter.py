"""Qdrant vector store adapter.

Why: Adapter kapselt alle externen Typen und wirft nur Domain-Fehler.
Qdrant only accepts UUID or integer point ids, so the deterministic SHA-1 id
is mapped onto a UUIDv5 and kept in the payload as `vector_id`.
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from notebook_rag.application.ports.vector_store_port import (
    IndexedVector,
    StoreMatch,
    VectorStorePort,
)
from notebook_rag.domain.errors import VectorStoreError

_POINT_NAMESPACE = uuid.UUID("6f1c2a1e-4d7b-5e0a-9c33-0b5a7e2d9f41")


@dataclass
class QdrantConfig:
    """Configuration for Qdrant client connection."""

    url: str
    collection: str = "notebook-knowledge"
    api_key: str | None = None
    timeout_s: int = 30


def point_id(vector_id: str) -> str:
    """Stable UUID for a vector id (same id -> same point -> overwrite on upsert)."""
    return str(uuid.uuid5(_POINT_NAMESPACE, vector_id))


class QdrantVectorStoreAdapter(VectorStorePort):
    """Qdrant adapter on top of qdrant_client.AsyncQdrantClient (cosine distance)."""

    def __init__(self, cfg: QdrantConfig, client: Any | None = None) -> None:
        """Initialize Qdrant adapter with configuration.

        Args:
            cfg: QdrantConfig with connection parameters
            client: Pre-built async client (tests); created lazily otherwise
        """
        self._cfg = cfg
        self._client = client

    @property
    def collection(self) -> str:
        return self._cfg.collection

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                qdrant_client = import_module("qdrant_client")
                self._client = qdrant_client.AsyncQdrantClient(
                    url=self._cfg.url,
                    api_key=self._cfg.api_key or None,
                    timeout=self._cfg.timeout_s,
                )
            except Exception as ex:
                raise VectorStoreError(f"Qdrant init failed: {ex}") from ex
        return self._client

    @staticmethod
    def _models() -> Any:
        try:
            return import_module("qdrant_client.models")
        except Exception as ex:  # pragma: no cover
            raise VectorStoreError("qdrant-client not available; install runtime deps") from ex

    async def _exists(self) -> bool:
        return bool(await self._get_client().collection_exists(self.collection))

    async def ensure_collection(self, dim: int) -> None:
        models = self._models()
        client = self._get_client()
        try:
            if await self._exists():
                info = await client.get_collection(self.collection)
                size = _vector_size(info)
                if size is not None and size != dim:
                    raise VectorStoreError(
                        f"Collection '{self.collection}' exists with wrong dimension: "
                        f"{size} != {dim}"
                    )
                return
            await client.create_collection(
                collection_name=self.collection,
                vectors_config=models.VectorParams(size=dim, distance=models.Distance.COSINE),
            )
        except VectorStoreError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"ensure_collection '{self.collection}': {ex}") from ex

    async def upsert(self, vectors: Sequence[IndexedVector]) -> None:
        models = self._models()
        client = self._get_client()
        try:
            points = [
                models.PointStruct(
                    id=point_id(v.id),
                    vector=list(v.values),
                    payload={**v.metadata, "vector_id": v.id},
                )
                for v in vectors
            ]
            await client.upsert(collection_name=self.collection, points=points, wait=True)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Upsert failed: {ex}") from ex

    async def query(self, vector: Sequence[float], top_k: int) -> list[StoreMatch]:
        client = self._get_client()
        try:
            if not await self._exists():
                return []
            res: Any = await client.query_points(
                collection_name=self.collection,
                query=list(vector),
                limit=top_k,
                with_payload=True,
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Search failed: {ex}") from ex
        matches: list[StoreMatch] = []
        for p in getattr(res, "points", res) or []:
            payload = dict(p.payload) if p.payload is not None else None
            vector_id = (payload or {}).get("vector_id", p.id)
            matches.append(StoreMatch(id=str(vector_id), score=p.score, metadata=payload))
        return matches

    async def delete_all(self) -> None:
        models = self._models()
        client = self._get_client()
        try:
            if not await self._exists():
                return
            await client.delete(
                collection_name=self.collection,
                points_selector=models.FilterSelector(filter=models.Filter()),
                wait=True,
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Delete failed: {ex}") from ex

    async def describe(self) -> dict[str, Any]:
        client = self._get_client()
        try:
            if not await self._exists():
                return {
                    "stats": {"collection": self.collection, "points_count": 0, "status": "missing"}
                }
            info = await client.get_collection(self.collection)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Stats failed: {ex}") from ex
        return {
            "stats": {
                "collection": self.collection,
                "points_count": getattr(info, "points_count", None),
                "indexed_vectors_count": getattr(info, "indexed_vectors_count", None),
                "dimension": _vector_size(info),
                "status": str(getattr(info, "status", "unknown")),
            }
        }


def _vector_size(info: Any) -> int | None:
    vectors = getattr(getattr(getattr(info, "config", None), "params", None), "vectors", None)
    size = getattr(vectors, "size", None)
    return int(size) if size is not None else None
