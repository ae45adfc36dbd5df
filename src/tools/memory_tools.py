"""Explicit memory tools.

These are tools the agent can call when the user explicitly asks to
remember, find, or forget something.
"""

from typing import Literal

from pydantic import Field

from src.config import settings
from src.memory.categories import classify
from src.memory.errors import StoreError, ValidationError
from src.memory.format import format_search_results
from src.memory.linker import build_session_id
from src.memory.store import Mem0MemoryStore
from src.tools.base import ToolParams, ToolResult
from src.tools.registry import registry

CategoryName = Literal["preference", "fact", "decision", "task", "event", "entity", "other"]


def _preview(text: str, width: int = 80) -> str:
    return f"{text[:width]}…" if len(text) > width else text


# -- memory_store ------------------------------------------------------------


class StoreParams(ToolParams):
    text: str = Field(description="Information to remember")
    category: CategoryName | None = Field(
        default=None,
        description="Category of the memory; detected from the text when omitted",
    )


@registry.tool(
    name="memory_store",
    description="Save important information to long-term memory.",
    category="memory",
    params_model=StoreParams,
)
async def memory_store(
    text: str,
    category: str | None = None,
    session_key: str | None = None,
) -> ToolResult:
    store = Mem0MemoryStore.get()
    if not store.enabled:
        return ToolResult(error="Memory store is not configured.")

    label = category or classify(text).value
    session_id = build_session_id(session_key, "tool", settings.session_fallback_policy)

    try:
        await store.add(text, {"type": label, "source": "tool", "session": session_id})
    except (StoreError, ValidationError) as exc:
        return ToolResult(error=str(exc))

    return ToolResult(
        text=f'Stored: "{_preview(text)}"',
        data={"category": label, "session": session_id},
    )


# -- memory_search -----------------------------------------------------------


class SearchParams(ToolParams):
    query: str = Field(description="Search query")
    limit: int = Field(default=5, ge=1, le=50, description="Max results (default: 5)")


@registry.tool(
    name="memory_search",
    description="Search through long-term memories for relevant information.",
    category="memory",
    params_model=SearchParams,
)
async def memory_search(query: str, limit: int = 5) -> ToolResult:
    store = Mem0MemoryStore.get()
    try:
        results = await store.search(query, limit=limit)
    except StoreError as exc:
        return ToolResult(error=str(exc))
    if not results:
        return ToolResult(text="No relevant memories found.", data={"count": 0, "memories": []})

    return ToolResult(
        text=f"Found {len(results)} memories:\n\n{format_search_results(results)}",
        data={
            "count": len(results),
            "memories": [
                {"id": r.id, "content": r.content, "similarity": r.similarity} for r in results
            ],
        },
    )


# -- memory_forget -----------------------------------------------------------


class ForgetParams(ToolParams):
    query: str | None = Field(default=None, description="Describe the memory to forget")
    memory_id: str | None = Field(default=None, description="Direct memory ID to delete")
    memory_ids: list[str] | None = Field(
        default=None, description="Several memory IDs to delete at once"
    )


@registry.tool(
    name="memory_forget",
    description=(
        "Forget memories. Deletes by ID when one or more are given, "
        "otherwise searches for the closest match and removes it."
    ),
    category="memory",
    params_model=ForgetParams,
)
async def memory_forget(
    query: str | None = None,
    memory_id: str | None = None,
    memory_ids: list[str] | None = None,
) -> ToolResult:
    store = Mem0MemoryStore.get()

    if memory_ids:
        ids = list(dict.fromkeys(memory_ids))
        try:
            await store.delete_many(ids)
        except StoreError as exc:
            return ToolResult(error=str(exc))
        return ToolResult(text=f"Forgot {len(ids)} memories.", data={"deleted": ids})

    if memory_id:
        try:
            await store.delete(memory_id)
        except StoreError as exc:
            return ToolResult(error=str(exc))
        return ToolResult(text="Memory forgotten.", data={"deleted": [memory_id]})

    if query:
        try:
            match = await store.forget_by_query(query)
        except StoreError as exc:
            return ToolResult(error=str(exc))
        if match is None:
            return ToolResult(text="No matching memory found.", data={"deleted": []})
        return ToolResult(
            text=f'Forgot: "{_preview(match.content)}"',
            data={"deleted": [match.id]},
        )

    return ToolResult(text="Provide a query or memory_id to forget.")
