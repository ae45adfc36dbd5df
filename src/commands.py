"""Slash command handlers: ``/remember`` and ``/recall``.

Each handler takes the raw argument string and returns the reply text.
"""

import logging

from src.config import settings
from src.memory.categories import classify
from src.memory.errors import StoreError, ValidationError
from src.memory.format import format_search_results
from src.memory.linker import build_session_id
from src.memory.store import MemoryStore

logger = logging.getLogger(__name__)


async def remember_command(
    store: MemoryStore,
    args: str | None,
    session_key: str | None = None,
) -> str:
    text = (args or "").strip()
    if not text:
        return "Usage: /remember <text to remember>"

    logger.debug("/remember: %s", text[:50])
    session_id = build_session_id(session_key, "command", settings.session_fallback_policy)

    try:
        await store.add(
            text,
            {"type": classify(text).value, "source": "command", "session": session_id},
        )
    except (StoreError, ValidationError):
        logger.exception("/remember failed")
        return "Failed to save memory. Check logs for details."

    preview = f"{text[:60]}…" if len(text) > 60 else text
    return f'Remembered: "{preview}"'


async def recall_command(store: MemoryStore, args: str | None, limit: int = 5) -> str:
    query = (args or "").strip()
    if not query:
        return "Usage: /recall <search query>"

    logger.debug("/recall: %s", query)

    try:
        results = await store.search(query, limit=limit)
    except StoreError:
        logger.exception("/recall failed")
        return "Failed to search memories. Check logs for details."

    if not results:
        return f'No memories found for: "{query}"'
    return f"Found {len(results)} memories:\n\n{format_search_results(results)}"
