from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from notebook_rag.application.ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


@dataclass
class ManageIndex:
    """Listing/stats and clear-all for the single notebook collection."""

    vector_store: VectorStorePort

    async def describe(self) -> dict[str, Any]:
        return await self.vector_store.describe()

    async def clear(self) -> None:
        logger.warning("Deleting all vectors from the notebook index")
        await self.vector_store.delete_all()
