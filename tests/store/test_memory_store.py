import pytest

from orchard.store import Document, MemoryVectorStore, VectorStore


@pytest.mark.asyncio
class TestMemoryVectorStore:
    async def test_add_get_count(self):
        store = MemoryVectorStore()
        await store.add([Document(id="a", content="alpha", embedding=[1.0, 0.0])])
        assert await store.count() == 1
        document = await store.get("a")
        assert document is not None and document.content == "alpha"
        assert await store.get("missing") is None

    async def test_add_requires_id(self):
        store = MemoryVectorStore()
        with pytest.raises(ValueError):
            await store.add([Document(content="anonymous")])

    async def test_search_ranks_by_similarity(self):
        store = MemoryVectorStore()
        await store.add(
            [
                Document(id="x", embedding=[1.0, 0.0]),
                Document(id="y", embedding=[0.7, 0.7]),
                Document(id="z", embedding=[0.0, 1.0]),
                Document(id="no_vector"),
            ]
        )

        results = await store.search([1.0, 0.0], limit=2)

        assert [r.document.id for r in results] == ["x", "y"]
        assert results[0].score == pytest.approx(1.0)
        assert len(await store.search([1.0, 0.0], limit=0)) == 3

    async def test_delete_and_clear(self):
        store = MemoryVectorStore()
        await store.add([Document(id="a"), Document(id="b")])
        await store.delete(["a", "unknown"])
        assert await store.list_ids() == ["b"]
        await store.clear()
        assert await store.count() == 0


def test_satisfies_protocol():
    assert isinstance(MemoryVectorStore(), VectorStore)
