from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

# Import domain models and re-export for convenience
from notebook_rag.domain.models import IndexedVector, StoreMatch

__all__ = ["IndexedVector", "StoreMatch", "VectorStorePort"]


@runtime_checkable
class VectorStorePort(Protocol):
    async def ensure_collection(self, dim: int) -> None:
        """Create the collection if missing; fail if it exists with another dimension."""
        ...

    async def upsert(self, vectors: Sequence[IndexedVector]) -> None:
        """Insert or overwrite (same id) one batch of vectors."""
        ...

    async def query(self, vector: Sequence[float], top_k: int) -> list[StoreMatch]:
        """Nearest neighbours with metadata, best first (ordering not guaranteed)."""
        ...

    async def delete_all(self) -> None: ...

    async def describe(self) -> dict[str, Any]:
        """{"listed": [...]} when the backend can list ids, else {"stats": {...}}."""
        ...
