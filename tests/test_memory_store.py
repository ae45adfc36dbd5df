"""Tests for the Mem0-backed memory store."""

from unittest.mock import AsyncMock, patch

import pytest

from src.memory.errors import StoreError, ValidationError
from src.memory.models import RecallResult
from src.memory.sanitize import MAX_CONTENT_LENGTH
from src.memory.store import Mem0MemoryStore


@pytest.fixture
def store() -> Mem0MemoryStore:
    """Create a store with a mocked Mem0 client."""
    s = Mem0MemoryStore.__new__(Mem0MemoryStore)
    s._client = AsyncMock()
    s._enabled = True
    s._user_id = "agent_memory"
    return s


@pytest.fixture
def disabled_store() -> Mem0MemoryStore:
    """Create a disabled store."""
    s = Mem0MemoryStore.__new__(Mem0MemoryStore)
    s._client = None
    s._enabled = False
    s._user_id = "agent_memory"
    return s


# -- init --------------------------------------------------------------------


def test_no_api_key_disables_store() -> None:
    s = Mem0MemoryStore(api_key="", collection="agent_memory")
    assert not s.enabled


def test_malformed_api_key_raises() -> None:
    with pytest.raises(ValidationError, match="whitespace"):
        Mem0MemoryStore(api_key="not a valid key", collection="agent_memory")


def test_valid_key_builds_client() -> None:
    with patch("mem0.AsyncMemoryClient") as client_cls:
        s = Mem0MemoryStore(api_key="m0-abcdefghijkl", collection="agent_memory")
    assert s.enabled
    client_cls.assert_called_once_with(api_key="m0-abcdefghijkl")


# -- add ---------------------------------------------------------------------


async def test_add_new_conversation_opens_run(store: Mem0MemoryStore) -> None:
    store._client.add.return_value = {"results": []}

    stored = await store.add("I like green tea", {"source": "capture"}, role="user")

    assert stored.id.startswith("conv_")
    args, kwargs = store._client.add.call_args
    assert args[0] == [{"role": "user", "content": "I like green tea"}]
    assert kwargs["user_id"] == "agent_memory"
    assert kwargs["run_id"] == stored.id
    assert kwargs["metadata"]["source"] == "capture"
    assert kwargs["metadata"]["conversation_id"] == stored.id


async def test_add_append_reuses_conversation(store: Mem0MemoryStore) -> None:
    store._client.add.return_value = {"results": []}

    stored = await store.add("Sounds good", role="assistant", conversation_id="conv_1")

    assert stored.id == "conv_1"
    _, kwargs = store._client.add.call_args
    assert kwargs["run_id"] == "conv_1"


async def test_add_document_returns_memory_id(store: Mem0MemoryStore) -> None:
    store._client.add.return_value = {"results": [{"id": "mem_9", "memory": "x"}]}

    stored = await store.add("Birthday is Jan 15", {"type": "event"})

    assert stored.id == "mem_9"
    args, kwargs = store._client.add.call_args
    assert args[0] == "Birthday is Jan 15"
    assert "run_id" not in kwargs


async def test_add_sanitizes_content_and_metadata(store: Mem0MemoryStore) -> None:
    store._client.add.return_value = {"results": []}

    await store.add("hello\x00 world", {"bad key": 1, "ok": "y"}, role="user")

    args, kwargs = store._client.add.call_args
    assert args[0][0]["content"] == "hello world"
    assert "bad key" not in kwargs["metadata"]
    assert kwargs["metadata"]["ok"] == "y"


async def test_add_empty_content_rejected_before_call(store: Mem0MemoryStore) -> None:
    with pytest.raises(ValidationError):
        await store.add("\x00\x01", role="user")
    store._client.add.assert_not_called()


async def test_add_oversize_content_rejected_before_call(store: Mem0MemoryStore) -> None:
    with pytest.raises(ValidationError, match="maximum length"):
        await store.add("x" * (MAX_CONTENT_LENGTH + 5), role="user")
    store._client.add.assert_not_called()


async def test_add_client_error_wrapped(store: Mem0MemoryStore) -> None:
    store._client.add.side_effect = RuntimeError("boom")
    with pytest.raises(StoreError, match="boom"):
        await store.add("something worth keeping", role="user")


async def test_add_disabled_raises(disabled_store: Mem0MemoryStore) -> None:
    with pytest.raises(StoreError, match="not configured"):
        await disabled_store.add("something worth keeping", role="user")


# -- search ------------------------------------------------------------------


async def test_search_returns_recall_results(store: Mem0MemoryStore) -> None:
    store._client.search.return_value = {
        "results": [
            {"id": "m1", "memory": "Likes coffee", "score": 0.9, "metadata": {"type": "preference"}},
            {"id": "m2", "memory": "Birthday is Jan 15", "metadata": None},
        ]
    }

    results = await store.search("coffee")

    assert len(results) == 2
    assert isinstance(results[0], RecallResult)
    assert results[0].similarity == 0.9
    assert results[1].similarity is None
    assert results[1].metadata == {}
    _, kwargs = store._client.search.call_args
    assert kwargs["limit"] == 5


async def test_search_truncates_to_limit(store: Mem0MemoryStore) -> None:
    store._client.search.return_value = [{"id": str(i), "memory": f"m{i}"} for i in range(10)]
    results = await store.search("q", limit=3)
    assert [r.id for r in results] == ["0", "1", "2"]


async def test_search_error_wrapped(store: Mem0MemoryStore) -> None:
    store._client.search.side_effect = ConnectionError("down")
    with pytest.raises(StoreError):
        await store.search("q")


async def test_search_disabled_returns_empty(disabled_store: Mem0MemoryStore) -> None:
    assert await disabled_store.search("anything") == []


# -- delete ------------------------------------------------------------------


async def test_delete_calls_client(store: Mem0MemoryStore) -> None:
    await store.delete("m1")
    store._client.delete.assert_called_once_with("m1")


async def test_delete_many_dedupes(store: Mem0MemoryStore) -> None:
    await store.delete_many(["m1", "m2", "m1"])
    store._client.batch_delete.assert_called_once_with([{"memory_id": "m1"}, {"memory_id": "m2"}])


async def test_delete_many_empty_is_noop(store: Mem0MemoryStore) -> None:
    await store.delete_many([])
    store._client.batch_delete.assert_not_called()


async def test_wipe_returns_count(store: Mem0MemoryStore) -> None:
    store._client.get_all.return_value = {"results": [{"id": "a"}, {"id": "b"}]}
    assert await store.wipe() == 2
    store._client.delete_all.assert_called_once_with(user_id="agent_memory")


async def test_forget_by_query_deletes_best_match(store: Mem0MemoryStore) -> None:
    store._client.search.return_value = {"results": [{"id": "m7", "memory": "Old phone"}]}
    match = await store.forget_by_query("phone")
    assert match.id == "m7"
    store._client.delete.assert_called_once_with("m7")


async def test_forget_by_query_no_match(store: Mem0MemoryStore) -> None:
    store._client.search.return_value = {"results": []}
    assert await store.forget_by_query("nothing") is None
    store._client.delete.assert_not_called()


# -- normalize ---------------------------------------------------------------


def test_normalize_empty() -> None:
    assert Mem0MemoryStore._normalize({}) == []
    assert Mem0MemoryStore._normalize([]) == []
    assert Mem0MemoryStore._normalize(None) == []


def test_normalize_skips_malformed_items() -> None:
    raw = {
        "results": [
            {"id": "1", "memory": {"text": "x"}, "score": 0.5},
            {"id": "2", "memory": "Likes tea", "score": 0.4},
        ]
    }
    results = Mem0MemoryStore._normalize(raw)
    assert [r.id for r in results] == ["2"]


async def test_search_with_malformed_item_does_not_raise(store: Mem0MemoryStore) -> None:
    store._client.search.return_value = {"results": [{"id": "1", "memory": {"text": "x"}}]}
    assert await store.search("hello there") == []


def test_extract_id_variants() -> None:
    assert Mem0MemoryStore._extract_id({"results": [{"id": "a"}]}) == "a"
    assert Mem0MemoryStore._extract_id({"id": "b"}) == "b"
    assert Mem0MemoryStore._extract_id([{"id": "c"}]) == "c"
    assert Mem0MemoryStore._extract_id(None) == ""
