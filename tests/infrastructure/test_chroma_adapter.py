import pytest

from notebook_rag.domain.errors import VectorStoreError
from notebook_rag.domain.models import IndexedVector
from notebook_rag.infrastructure.vectorstore.chroma_vector_store import ChromaVectorStoreAdapter


class FakeCollection:
    def __init__(self) -> None:
        self.rows: dict[str, dict] = {}

    def upsert(self, ids, embeddings, metadatas, documents):
        for i, e, m, d in zip(ids, embeddings, metadatas, documents):
            self.rows[i] = {"embedding": e, "metadata": m, "document": d}

    def query(self, query_embeddings, n_results, include):
        ids = list(self.rows)[:n_results]
        return {
            "ids": [ids],
            "metadatas": [[self.rows[i]["metadata"] for i in ids]],
            "distances": [[0.25 for _ in ids]],
        }

    def get(self, limit, include):
        return {"ids": list(self.rows)[:limit]}


class FakeChromaClient:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_or_create_collection(self, name, metadata=None):
        return self.collections.setdefault(name, FakeCollection())

    def list_collections(self):
        return list(self.collections)

    def delete_collection(self, name):
        del self.collections[name]


@pytest.mark.asyncio
async def test_round_trip_through_fake_chroma():
    client = FakeChromaClient()
    adapter = ChromaVectorStoreAdapter(collection="nb", _client=client)

    await adapter.ensure_collection(2)
    await adapter.upsert([IndexedVector(id="v1", values=(0.1, 0.2), metadata={"text": "hello"})])
    matches = await adapter.query([0.1, 0.2], top_k=3)

    assert client.collections["nb"].rows["v1"]["document"] == "hello"
    assert matches[0].id == "v1"
    # Distanz 0.25 -> Score 0.75
    assert matches[0].score == pytest.approx(0.75)
    assert await adapter.describe() == {"listed": ["v1"]}


@pytest.mark.asyncio
async def test_delete_all_drops_the_collection():
    client = FakeChromaClient()
    adapter = ChromaVectorStoreAdapter(collection="nb", _client=client)
    await adapter.upsert([IndexedVector(id="v1", values=(0.1,), metadata={"text": "x"})])

    await adapter.delete_all()

    assert "nb" not in client.collections
    assert await adapter.describe() == {"listed": []}


@pytest.mark.asyncio
async def test_errors_are_translated():
    class Broken(FakeChromaClient):
        def get_or_create_collection(self, name, metadata=None):
            raise RuntimeError("disk full")

    adapter = ChromaVectorStoreAdapter(_client=Broken())
    with pytest.raises(VectorStoreError):
        await adapter.query([0.1], top_k=1)
