"""Host lifecycle hooks wiring the capture and recall pipelines together."""

import logging
from typing import Any

from src.config import Settings, settings
from src.memory.capture import CapturePipeline, CaptureResult
from src.memory.linker import ConversationLinker
from src.memory.recall import RecallPipeline
from src.memory.store import MemoryStore

logger = logging.getLogger(__name__)


class MemoryHooks:
    """Owns the conversation linker and both pipelines for one host.

    The host calls ``before_agent_start`` before each agent turn and
    ``agent_end`` after it. The session key seen on the most recent
    before-turn event is used to attribute captured turns.
    """

    def __init__(
        self,
        store: MemoryStore,
        config: Settings | None = None,
        linker: ConversationLinker | None = None,
    ) -> None:
        self.config = config or settings
        self.store = store
        self.linker = linker or ConversationLinker(
            ttl_seconds=self.config.conversation_ttl_seconds,
            max_sessions=self.config.conversation_max_sessions,
        )
        self.capture = CapturePipeline(
            store,
            self.linker,
            capture_mode=self.config.capture_mode,
            fallback_policy=self.config.session_fallback_policy,
        )
        self.recall = RecallPipeline(
            store,
            limit=self.config.recall_limit,
            min_prompt_length=self.config.recall_min_prompt_length,
        )
        self.session_key: str | None = None

    async def before_agent_start(
        self,
        event: dict[str, Any],
        ctx: dict[str, Any] | None = None,
    ) -> dict[str, str] | None:
        if ctx and ctx.get("sessionKey"):
            self.session_key = str(ctx["sessionKey"])

        if not self.config.auto_recall or not self.store.enabled:
            return None

        context = await self.recall.handle(event)
        if context is None:
            return None
        return {"prependContext": context}

    async def agent_end(self, event: dict[str, Any]) -> CaptureResult | None:
        if not self.config.auto_capture or not self.store.enabled:
            return None
        return await self.capture.capture(event, self.session_key)
