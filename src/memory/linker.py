"""Session to conversation tracking.

Consecutive turns of one session are appended to the conversation record
created by the first turn that was stored successfully. The mapping lives
for as long as the owning ``ConversationLinker`` does (normally the
process). By default nothing is evicted; ``ttl_seconds`` and
``max_sessions`` bound it when session churn is high.
"""

import asyncio
import logging
import re
import time
from collections import OrderedDict
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_SESSION_ID_LENGTH = 128

# Fallback ids used when the host gave no session key, by entry point.
FALLBACK_SESSION_IDS = {
    "capture": "default",
    "command": "command",
    "tool": "tool",
}


def build_session_id(
    session_key: str | None,
    entry_point: str = "capture",
    policy: str = "shared",
) -> str:
    """Derive a stable, document-id-safe identifier from a host session key.

    Without a key, ``policy="shared"`` groups every entry point under
    ``"default"`` while ``"per_entry_point"`` keeps command, tool and
    capture turns apart.
    """
    if session_key:
        sid = re.sub(r"[^a-z0-9_-]+", "_", session_key.strip().lower()).strip("_")
        if sid:
            return sid[:MAX_SESSION_ID_LENGTH]

    if policy == "per_entry_point":
        return FALLBACK_SESSION_IDS.get(entry_point, FALLBACK_SESSION_IDS["capture"])
    return FALLBACK_SESSION_IDS["capture"]


@dataclass(frozen=True)
class _Link:
    conversation_id: str
    bound_at: float


class ConversationLinker:
    """Maps session ids to the id of their open conversation record."""

    def __init__(
        self,
        ttl_seconds: float = 0,
        max_sessions: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._links: OrderedDict[str, _Link] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}
        self._ttl = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock

    def __len__(self) -> int:
        return len(self._links)

    def _expired(self, link: _Link) -> bool:
        return self._ttl > 0 and self._clock() - link.bound_at >= self._ttl

    def conversation_id_for(self, session_id: str) -> str | None:
        """Conversation id bound to ``session_id``, or None."""
        link = self._links.get(session_id)
        if link is None or self._expired(link):
            return None
        return link.conversation_id

    def bind(self, session_id: str, conversation_id: str) -> bool:
        """Bind once. Returns False (and changes nothing) if already bound."""
        if self.conversation_id_for(session_id) is not None:
            logger.debug("Session %s already bound, ignoring %s", session_id, conversation_id)
            return False

        self._links.pop(session_id, None)
        self._links[session_id] = _Link(conversation_id, self._clock())
        self._evict()
        return True

    def _evict(self) -> None:
        # Links are ordered by bind time, so expired ones sit at the front.
        while self._links:
            session_id, link = next(iter(self._links.items()))
            if not self._expired(link):
                break
            del self._links[session_id]
            logger.debug("Expired conversation link for session %s", session_id)

        if self._max_sessions <= 0:
            return
        while len(self._links) > self._max_sessions:
            session_id, _ = self._links.popitem(last=False)
            logger.debug("Evicted conversation link for session %s", session_id)

    @asynccontextmanager
    async def claim(self, session_id: str) -> AsyncIterator[None]:
        """Hold the session's lock so only one capture decides append-vs-new at a time.

        The lock is dropped once no capture holds or waits for it.
        """
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._waiters[session_id] = self._waiters.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._waiters[session_id] - 1
            if remaining:
                self._waiters[session_id] = remaining
            else:
                del self._waiters[session_id]
                del self._locks[session_id]
