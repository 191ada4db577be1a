"""Tests for the in-memory document store and its optimistic transactions."""
import pytest

from app.core.errors import ConflictError
from app.db.store import ASCENDING, DESCENDING, MemoryDocumentStore, matches


@pytest.mark.asyncio
async def test_insert_assigns_id_and_get_returns_copy(store):
    doc = await store.insert("things", {"name": "lamp"})

    fetched = await store.get("things", doc["_id"])
    assert fetched == {"_id": doc["_id"], "name": "lamp"}

    fetched["name"] = "changed"
    assert (await store.get("things", doc["_id"]))["name"] == "lamp"


@pytest.mark.asyncio
async def test_find_filters_sorts_and_limits(store):
    for name, size in [("b", 2), ("a", 5), ("c", None), ("d", 9)]:
        await store.insert("things", {"name": name, "size": size, "kind": "x"})
    await store.insert("things", {"name": "e", "size": 1, "kind": "y"})

    names = [d["name"] for d in await store.find("things", {"kind": "x"}, sort=[("name", ASCENDING)])]
    assert names == ["a", "b", "c", "d"]

    bigger = await store.find("things", {"size": {"$gt": 2}}, sort=[("size", DESCENDING)])
    assert [d["name"] for d in bigger] == ["d", "a"]

    first = await store.find("things", {"kind": "x"}, sort=[("name", ASCENDING)], limit=2)
    assert [d["name"] for d in first] == ["a", "b"]

    assert await store.count("things", {"size": {"$ne": None}}) == 4


def test_matches_in_and_unknown_operator():
    assert matches({"k": "a"}, {"k": {"$in": ["a", "b"]}})
    assert not matches({"k": "c"}, {"k": {"$in": ["a", "b"]}})
    with pytest.raises(ValueError):
        matches({"k": 1}, {"k": {"$regex": "1"}})


@pytest.mark.asyncio
async def test_update_and_delete_missing_document(store):
    assert await store.update("things", "missing", {"a": 1}) is False
    assert await store.delete("things", "missing") is False


@pytest.mark.asyncio
async def test_transaction_applies_all_writes(store):
    doc = await store.insert("accounts", {"balance": 10})

    async def _move(session):
        current = await session.get("accounts", doc["_id"])
        await session.update("accounts", doc["_id"], {"balance": current["balance"] - 4})
        await session.insert("log", {"delta": -4})
        return "ok"

    assert await store.run_transaction(_move) == "ok"
    assert (await store.get("accounts", doc["_id"]))["balance"] == 6
    assert await store.count("log") == 1


@pytest.mark.asyncio
async def test_transaction_error_discards_writes(store):
    doc = await store.insert("accounts", {"balance": 10})

    async def _fail(session):
        await session.get("accounts", doc["_id"])
        await session.update("accounts", doc["_id"], {"balance": 0})
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await store.run_transaction(_fail)
    assert (await store.get("accounts", doc["_id"]))["balance"] == 10


@pytest.mark.asyncio
async def test_conflicting_write_is_retried(store):
    doc = await store.insert("accounts", {"balance": 10})
    attempts = []

    async def _increment(session):
        attempts.append(1)
        current = await session.get("accounts", doc["_id"])
        if len(attempts) == 1:
            # Someone else writes between our read and our commit
            await store.update("accounts", doc["_id"], {"balance": current["balance"] + 100})
        await session.update("accounts", doc["_id"], {"balance": current["balance"] + 1})

    await store.run_transaction(_increment)

    assert len(attempts) == 2
    assert (await store.get("accounts", doc["_id"]))["balance"] == 111


@pytest.mark.asyncio
async def test_query_conflict_on_new_document(store):
    attempts = []

    async def _insert_if_empty(session):
        attempts.append(1)
        if await session.count("slots", {"owner": "a"}) == 0:
            if len(attempts) == 1:
                await store.insert("slots", {"owner": "a"})
            await session.insert("slots", {"owner": "a"})

    await store.run_transaction(_insert_if_empty)

    assert len(attempts) == 2
    assert await store.count("slots", {"owner": "a"}) == 1


@pytest.mark.asyncio
async def test_retries_exhausted_raises_conflict():
    store = MemoryDocumentStore(max_retries=3)
    doc = await store.insert("accounts", {"balance": 0})
    attempts = []

    async def _always_conflicts(session):
        attempts.append(1)
        await session.get("accounts", doc["_id"])
        await store.update("accounts", doc["_id"], {"balance": len(attempts)})
        await session.update("accounts", doc["_id"], {"balance": -1})

    with pytest.raises(ConflictError):
        await store.run_transaction(_always_conflicts)
    assert len(attempts) == 3
    assert (await store.get("accounts", doc["_id"]))["balance"] == 3


@pytest.mark.asyncio
async def test_read_after_write_is_rejected(store):
    async def _bad(session):
        await session.insert("things", {"name": "a"})
        await session.find("things")

    with pytest.raises(RuntimeError):
        await store.run_transaction(_bad)
