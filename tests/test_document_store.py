"""Contract tests run against the memory and SQL (aiosqlite) document stores."""
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import tappr.models  # noqa: F401  (registers tables on Base.metadata)
from tappr.database import Base
from tappr.errors import DocumentNotFound
from tappr.store import Filter, MemoryDocumentStore
from tappr.store.sql import SqlDocumentStore


@pytest.fixture(params=["memory", "sql"])
async def doc_store(request):
    if request.param == "memory":
        yield MemoryDocumentStore()
        return

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    store = SqlDocumentStore(engine)
    yield store
    await store.close()


class TestReadWrite:
    """Tests for add/get/set/update."""

    async def test_add_then_get(self, doc_store):
        doc_id = await doc_store.add("things", {"name": "lamp", "tags": ["a"]})
        document = await doc_store.get("things", doc_id)
        assert document.id == doc_id
        assert document.data == {"name": "lamp", "tags": ["a"]}

    async def test_get_missing(self, doc_store):
        assert await doc_store.get("things", "missing") is None

    async def test_set_creates_and_replaces(self, doc_store):
        await doc_store.set("things", "fixed", {"a": 1, "b": 2})
        await doc_store.set("things", "fixed", {"a": 3})
        assert (await doc_store.get("things", "fixed")).data == {"a": 3}

    async def test_update_merges_top_level(self, doc_store):
        doc_id = await doc_store.add("things", {"a": 1, "nested": {"x": 1}})
        await doc_store.update("things", doc_id, {"b": 2, "nested": {"y": 2}})
        assert (await doc_store.get("things", doc_id)).data == {"a": 1, "b": 2, "nested": {"y": 2}}

    async def test_update_missing_raises(self, doc_store):
        with pytest.raises(DocumentNotFound):
            await doc_store.update("things", "missing", {"a": 1})

    async def test_collections_are_separate(self, doc_store):
        await doc_store.set("left", "same", {"side": "left"})
        await doc_store.set("right", "same", {"side": "right"})
        assert (await doc_store.get("left", "same")).data == {"side": "left"}

    async def test_returned_data_is_a_copy(self, doc_store):
        doc_id = await doc_store.add("things", {"tags": ["a"]})
        document = await doc_store.get("things", doc_id)
        document.data["tags"].append("b")
        assert (await doc_store.get("things", doc_id)).data == {"tags": ["a"]}


class TestDelete:
    """Tests for removing documents."""

    async def test_delete(self, doc_store):
        doc_id = await doc_store.add("things", {"a": 1})
        seen = []
        unsubscribe = await doc_store.subscribe("things", doc_id, seen.append)

        await doc_store.delete("things", doc_id)
        assert await doc_store.get("things", doc_id) is None
        assert seen[-1] is None
        unsubscribe()

    async def test_delete_missing_is_noop(self, doc_store):
        await doc_store.delete("things", "missing")
        assert await doc_store.query("things") == []

    async def test_nested_collection_path(self, doc_store):
        await doc_store.add("chats/c1/messages", {"text": "hi"})
        assert len(await doc_store.query("chats/c1/messages")) == 1
        assert await doc_store.query("chats/c2/messages") == []


class TestConditionalUpdate:
    """Tests for update_if compare-and-set."""

    async def test_applies_when_guard_holds(self, doc_store):
        doc_id = await doc_store.add("things", {"status": "pending"})
        applied = await doc_store.update_if(
            "things", doc_id, {"status": "done"}, field="status", expected=["pending"]
        )
        assert applied is True
        assert (await doc_store.get("things", doc_id)).data["status"] == "done"

    async def test_skips_when_guard_fails(self, doc_store):
        doc_id = await doc_store.add("things", {"status": "done"})
        applied = await doc_store.update_if(
            "things", doc_id, {"status": "expired"}, field="status", expected=["pending", "waiting"]
        )
        assert applied is False
        assert (await doc_store.get("things", doc_id)).data["status"] == "done"

    async def test_missing_document(self, doc_store):
        with pytest.raises(DocumentNotFound):
            await doc_store.update_if("things", "missing", {}, field="status", expected=["x"])


class TestQuery:
    """Tests for equality and membership filters."""

    async def test_filters(self, doc_store):
        await doc_store.add("people", {"city": "Leeds", "status": "pending"})
        await doc_store.add("people", {"city": "Leeds", "status": "done"})
        await doc_store.add("people", {"city": "York", "status": "pending"})
        await doc_store.add("other", {"city": "Leeds", "status": "pending"})

        leeds = await doc_store.query("people", [Filter("city", "==", "Leeds")])
        assert len(leeds) == 2

        pending_leeds = await doc_store.query(
            "people", [Filter("city", "==", "Leeds"), Filter("status", "==", "pending")]
        )
        assert len(pending_leeds) == 1

        either = await doc_store.query("people", [Filter("status", "in", ["pending", "done"])])
        assert len(either) == 3

        assert len(await doc_store.query("people")) == 3
        assert await doc_store.query("people", [Filter("city", "==", "Hull")]) == []

    async def test_array_contains(self, doc_store):
        await doc_store.add("rooms", {"members": ["ana", "ben"], "kind": "chat"})
        await doc_store.add("rooms", {"members": ["ben", "cy"], "kind": "chat"})
        await doc_store.add("rooms", {"members": "ben", "kind": "chat"})

        with_ben = await doc_store.query("rooms", [Filter("members", "array-contains", "ben")])
        assert len(with_ben) == 2

        with_ana = await doc_store.query(
            "rooms", [Filter("members", "array-contains", "ana"), Filter("kind", "==", "chat")]
        )
        assert [d.data["members"] for d in with_ana] == [["ana", "ben"]]

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            Filter("city", ">", "A")


class TestSubscribe:
    """Tests for change subscriptions."""

    async def test_immediate_and_on_change(self, doc_store):
        doc_id = await doc_store.add("things", {"n": 1})
        seen = []
        unsubscribe = await doc_store.subscribe("things", doc_id, seen.append)

        await doc_store.update("things", doc_id, {"n": 2})
        await doc_store.update_if("things", doc_id, {"n": 3}, field="n", expected=[2])
        await doc_store.update_if("things", doc_id, {"n": 99}, field="n", expected=[1])
        assert [d.data["n"] for d in seen] == [1, 2, 3]

        unsubscribe()
        await doc_store.update("things", doc_id, {"n": 4})
        assert len(seen) == 3

    async def test_subscribe_before_creation(self, doc_store):
        seen = []
        unsubscribe = await doc_store.subscribe("things", "later", seen.append)
        await doc_store.set("things", "later", {"n": 1})
        assert seen[0] is None
        assert seen[1].data == {"n": 1}
        unsubscribe()

    async def test_failing_listener_does_not_break_writes(self, doc_store):
        doc_id = await doc_store.add("things", {"n": 1})
        calls = []

        def explode(document):
            calls.append(document)
            raise RuntimeError("boom")

        unsubscribe = await doc_store.subscribe("things", doc_id, explode)
        await doc_store.update("things", doc_id, {"n": 2})
        assert (await doc_store.get("things", doc_id)).data == {"n": 2}
        assert len(calls) == 2
        unsubscribe()

    async def test_ping(self, doc_store):
        await doc_store.ping()
