"""Recall relevant memories before an agent turn starts."""

import logging
from typing import Any

from src.memory.errors import StoreError
from src.memory.extract import count_user_turns
from src.memory.format import format_recall_context
from src.memory.models import RecallEvent, Transcript, parse_recall_event
from src.memory.store import DEFAULT_SEARCH_LIMIT, MemoryStore

logger = logging.getLogger(__name__)

MIN_PROMPT_LENGTH = 5


class RecallPipeline:
    """Searches the store with the incoming prompt and formats a context block."""

    def __init__(
        self,
        store: MemoryStore,
        limit: int = DEFAULT_SEARCH_LIMIT,
        min_prompt_length: int = MIN_PROMPT_LENGTH,
    ) -> None:
        self._store = store
        self._limit = limit
        self._min_prompt_length = min_prompt_length

    async def recall(self, prompt: str | None, transcript: Transcript | None = None) -> str | None:
        """Context block to prepend to ``prompt``, or None when there is nothing to add.

        Results are used in the order the store ranked them. Store failures
        are logged and treated as "nothing recalled".
        """
        if not prompt or len(prompt) < self._min_prompt_length:
            return None

        logger.debug(
            "Recalling memories (user turns so far: %d)", count_user_turns(transcript or [])
        )

        try:
            results = await self._store.search(prompt, limit=self._limit)
        except StoreError:
            logger.exception("Recall failed")
            return None

        context = format_recall_context(results)
        if context is None:
            logger.debug("No memories found to inject")
            return None

        logger.debug("Injecting context (%d chars, %d memories)", len(context), len(results))
        return context

    async def handle(self, event: RecallEvent | dict[str, Any]) -> str | None:
        """Run ``recall`` for a raw host event."""
        parsed = parse_recall_event(event)
        return await self.recall(parsed.prompt, parsed.messages)
