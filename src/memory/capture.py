"""Automatic capture of finished agent turns.

After each agent turn the newest exchange (last user message plus every
reply that followed) is cleaned and stored. Turns of one session are
appended to a single conversation record so the store sees one growing
conversation rather than a pile of unrelated messages.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.memory.categories import classify
from src.memory.errors import StoreError, ValidationError
from src.memory.extract import extract_last_turn, flatten_content
from src.memory.linker import ConversationLinker, build_session_id
from src.memory.models import CaptureEvent, Role, Turn, parse_capture_event
from src.memory.noise import clean_envelope, is_system_noise, is_too_short, strip_recall_context
from src.memory.store import MemoryStore

logger = logging.getLogger(__name__)

CAPTURE_ROLES = (Role.USER, Role.ASSISTANT)


@dataclass
class CaptureResult:
    """What one capture invocation did."""

    session_id: str = ""
    stored: int = 0
    skipped: int = 0
    failed: int = 0
    conversation_id: str | None = None


def prepare_content(turn: Turn, capture_mode: str = "all") -> str | None:
    """Clean a turn for storage, or return None if it should not be stored."""
    if turn.role not in CAPTURE_ROLES:
        return None

    content = flatten_content(turn)
    if capture_mode == "all":
        content = strip_recall_context(content)

    if is_system_noise(content):
        return None

    content = clean_envelope(content)
    if is_too_short(content):
        return None
    return content


class CapturePipeline:
    """Stores the newest exchange of each finished agent turn."""

    def __init__(
        self,
        store: MemoryStore,
        linker: ConversationLinker,
        capture_mode: str = "all",
        fallback_policy: str = "shared",
    ) -> None:
        self._store = store
        self._linker = linker
        self._capture_mode = capture_mode
        self._fallback_policy = fallback_policy

    async def capture(
        self,
        event: CaptureEvent | dict[str, Any],
        session_key: str | None = None,
    ) -> CaptureResult:
        """Persist what is worth persisting from a finished turn.

        Turns are stored one after another in transcript order. A failed
        store is logged and skipped; earlier successes stand and later
        turns are still attempted.
        """
        parsed = parse_capture_event(event)
        session_id = build_session_id(session_key, "capture", self._fallback_policy)
        result = CaptureResult(session_id=session_id)

        if not parsed.success or not parsed.messages:
            return result

        turns = extract_last_turn(parsed.messages)
        timestamp = datetime.now(UTC).isoformat()

        async with self._linker.claim(session_id):
            conversation_id = self._linker.conversation_id_for(session_id)

            for turn in turns:
                content = prepare_content(turn, self._capture_mode)
                if content is None:
                    result.skipped += 1
                    continue

                logger.debug(
                    "Capturing %s message (%d chars) -> conversation %s",
                    turn.role.value,
                    len(content),
                    conversation_id or "new",
                )

                try:
                    stamp = turn.timestamp.isoformat() if turn.timestamp else timestamp
                    stored = await self._store.add(
                        content,
                        {
                            "source": "capture",
                            "session": session_id,
                            "timestamp": stamp,
                            "category": classify(content).value,
                        },
                        role=turn.role.value,
                        conversation_id=conversation_id,
                    )
                except (StoreError, ValidationError):
                    logger.exception("Capture failed for %s message", turn.role.value)
                    result.failed += 1
                    continue

                result.stored += 1
                if conversation_id is None and stored.id:
                    self._linker.bind(session_id, stored.id)
                    conversation_id = stored.id
                    logger.debug("Started new conversation: %s", conversation_id)

        result.conversation_id = conversation_id
        if result.stored:
            logger.info(
                "Captured %d message(s) for session %s (%d skipped, %d failed)",
                result.stored,
                session_id,
                result.skipped,
                result.failed,
            )
        return result
