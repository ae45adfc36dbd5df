"""Shared test fixtures."""

from unittest.mock import AsyncMock

import pytest

from src.memory.linker import ConversationLinker
from src.memory.models import StoredMemory
from src.memory.store import Mem0MemoryStore


@pytest.fixture(autouse=True)
def _reset_store_singleton():
    Mem0MemoryStore._reset()
    yield
    Mem0MemoryStore._reset()


@pytest.fixture
def mock_store() -> AsyncMock:
    """A MemoryStore stand-in that hands out sequential conversation ids."""
    store = AsyncMock()
    store.enabled = True
    ids = iter(["A", "B", "C", "D", "E"])
    store.add.side_effect = lambda *args, **kwargs: StoredMemory(
        id=kwargs.get("conversation_id") or next(ids)
    )
    store.search.return_value = []
    return store


@pytest.fixture
def linker() -> ConversationLinker:
    return ConversationLinker()
