"""Memory store capability and its Mem0 implementation.

Supports two modes controlled by environment variables:
- Hosted (default): Set MEM0_API_KEY. Uses Mem0's cloud platform.
- Disabled: No MEM0_API_KEY. ``enabled`` is False, searches return
  nothing and writes raise StoreError.

A "conversation" is a Mem0 run: the first stored turn of a session opens
a new ``run_id`` and later turns are added under the same one.
"""

import logging
import uuid
from typing import Any, Protocol

from pydantic import ValidationError as ModelValidationError

from src.config import settings
from src.memory.errors import StoreError, ValidationError
from src.memory.models import RecallResult, StoredMemory
from src.memory.sanitize import (
    sanitize_content,
    sanitize_metadata,
    validate_api_key_format,
    validate_collection_name,
    validate_content_length,
)

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 5


class MemoryStore(Protocol):
    """What the capture and recall pipelines need from a store."""

    @property
    def enabled(self) -> bool: ...

    async def add(
        self,
        content: str,
        metadata: dict[str, Any] | None = None,
        *,
        role: str | None = None,
        conversation_id: str | None = None,
    ) -> StoredMemory: ...

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[RecallResult]: ...

    async def delete(self, memory_id: str) -> None: ...

    async def delete_many(self, memory_ids: list[str]) -> None: ...


class Mem0MemoryStore:
    """Singleton Mem0-backed store.

    Get the shared instance via ``Mem0MemoryStore.get()``.
    """

    _instance: "Mem0MemoryStore | None" = None

    def __init__(self, api_key: str | None = None, collection: str | None = None) -> None:
        self._client: Any = None
        self._enabled = False
        self._user_id = collection or settings.get_collection_name()
        self._init_backend(settings.mem0_api_key if api_key is None else api_key)

    def _init_backend(self, api_key: str) -> None:
        if not api_key:
            logger.warning("Memory store disabled. Set MEM0_API_KEY to enable.")
            return

        validate_api_key_format(api_key)
        try:
            validate_collection_name(self._user_id)
        except ValidationError as exc:
            logger.warning("Collection name warning: %s", exc)

        from mem0 import AsyncMemoryClient

        self._client = AsyncMemoryClient(api_key=api_key)
        self._enabled = True
        logger.info("Memory store: hosted mode (collection: %s)", self._user_id)

    @classmethod
    def get(cls) -> "Mem0MemoryStore":
        """Return the shared store instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def collection(self) -> str:
        return self._user_id

    def _require_client(self) -> Any:
        if not self._enabled:
            msg = "Memory store is not configured"
            raise StoreError(msg)
        return self._client

    # -- Write ---------------------------------------------------------------

    async def add(
        self,
        content: str,
        metadata: dict[str, Any] | None = None,
        *,
        role: str | None = None,
        conversation_id: str | None = None,
    ) -> StoredMemory:
        """Store one item.

        With a ``role`` the item is a conversation message: it opens a new
        run unless ``conversation_id`` names an existing one. Without a role
        it is stored as a standalone document.

        Returns:
            The conversation id for messages, otherwise the memory id.
        """
        cleaned = sanitize_content(content)
        if not cleaned.strip():
            msg = "content is empty after sanitizing"
            raise ValidationError(msg)
        validate_content_length(content)
        client = self._require_client()

        meta = sanitize_metadata(metadata)
        kwargs: dict[str, Any] = {"user_id": self._user_id}

        if role:
            run_id = conversation_id or f"conv_{uuid.uuid4().hex}"
            messages: Any = [{"role": role, "content": cleaned}]
            kwargs["run_id"] = run_id
            meta["conversation_id"] = run_id
        else:
            run_id = None
            messages = cleaned
        kwargs["metadata"] = meta

        try:
            raw = await client.add(messages, **kwargs)
        except Exception as exc:
            msg = f"Failed to store memory: {exc}"
            raise StoreError(msg) from exc

        memory_id = run_id or self._extract_id(raw)
        if not memory_id:
            msg = "Store returned no memory id"
            raise StoreError(msg)

        logger.debug(
            "Stored memory [%s] in %s (%d chars)", role or "document", memory_id, len(cleaned)
        )
        return StoredMemory(id=memory_id)

    # -- Read ----------------------------------------------------------------

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[RecallResult]:
        """Best-ranked memories for ``query``, at most ``limit`` of them."""
        if not self._enabled:
            return []

        try:
            raw = await self._client.search(query, user_id=self._user_id, limit=limit)
        except Exception as exc:
            msg = f"Memory search failed: {exc}"
            raise StoreError(msg) from exc

        results = self._normalize(raw)[:limit]
        logger.debug("Search returned %d memories", len(results))
        return results

    async def get_all(self) -> list[RecallResult]:
        """Every memory in the collection."""
        if not self._enabled:
            return []

        try:
            raw = await self._client.get_all(user_id=self._user_id)
        except Exception as exc:
            msg = f"Failed to fetch memories: {exc}"
            raise StoreError(msg) from exc
        return self._normalize(raw)

    # -- Delete --------------------------------------------------------------

    async def delete(self, memory_id: str) -> None:
        client = self._require_client()
        try:
            await client.delete(memory_id)
        except Exception as exc:
            msg = f"Failed to delete memory {memory_id}: {exc}"
            raise StoreError(msg) from exc
        logger.info("Deleted memory: %s", memory_id)

    async def delete_many(self, memory_ids: list[str]) -> None:
        ids = list(dict.fromkeys(memory_ids))
        if not ids:
            return

        client = self._require_client()
        try:
            await client.batch_delete([{"memory_id": mid} for mid in ids])
        except Exception as exc:
            msg = f"Failed to delete {len(ids)} memories: {exc}"
            raise StoreError(msg) from exc
        logger.info("Deleted %d memories", len(ids))

    async def wipe(self) -> int:
        """Delete every memory in the collection. Returns how many existed."""
        existing = await self.get_all()
        client = self._require_client()
        try:
            await client.delete_all(user_id=self._user_id)
        except Exception as exc:
            msg = f"Failed to wipe collection {self._user_id}: {exc}"
            raise StoreError(msg) from exc
        logger.info("Wiped %d memories from %s", len(existing), self._user_id)
        return len(existing)

    async def forget_by_query(self, query: str) -> RecallResult | None:
        """Delete the closest match for ``query``. Returns it, or None if nothing matched."""
        matches = await self.search(query, limit=1)
        if not matches:
            return None
        await self.delete(matches[0].id)
        return matches[0]

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    def _extract_id(raw: Any) -> str:
        if isinstance(raw, dict):
            items = raw.get("results") or []
            if items and isinstance(items[0], dict) and items[0].get("id"):
                return str(items[0]["id"])
            return str(raw.get("id") or raw.get("event_id") or "")
        if isinstance(raw, list) and raw and isinstance(raw[0], dict):
            return str(raw[0].get("id", ""))
        return ""

    @staticmethod
    def _normalize(raw: Any) -> list[RecallResult]:
        """Normalize Mem0 results (hosted or local) into RecallResult list."""
        if isinstance(raw, dict):
            items = raw.get("results", [])
        elif isinstance(raw, list):
            items = raw
        else:
            items = []

        results = []
        for item in items:
            if not isinstance(item, dict):
                continue
            score = item.get("score")
            try:
                result = RecallResult(
                    id=str(item.get("id", "")),
                    content=item.get("memory") or item.get("content") or "",
                    similarity=float(score) if isinstance(score, (int, float)) else None,
                    metadata=item.get("metadata") or {},
                )
            except ModelValidationError:
                logger.warning("Skipping malformed memory %r", item.get("id"))
                continue
            results.append(result)
        return results
