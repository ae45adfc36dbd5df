"""Separate conversational content from platform noise and transport metadata."""

import re

from src.memory.format import CONTEXT_END, CONTEXT_START

MIN_CONTENT_LENGTH = 10

# Matched against the FULL trimmed message, never a substring.
_NOISE_PATTERNS = [
    # [2026-02-05 14:12 PST] WhatsApp gateway connected.
    re.compile(r"^\[[\d\-\s:]+[A-Z]{2,4}\]\s+\w+\s+gateway\s+\w+\.?\s*$", re.IGNORECASE),
    # [2026-02-05 14:12 PST] Session expired.
    re.compile(r"^\[[\d\-\s:]+[A-Z]{2,4}\]\s+.*session\s+\w+\.?\s*$", re.IGNORECASE),
]

# [WhatsApp +14697030568 +5m 2026-02-05 14:12 PST]
_LEADING_HEADER = re.compile(
    r"^\[(?:[A-Za-z][\w-]*\s+)?[^\]\n]*?"
    r"\d{4}-\d{2}-\d{2}[ T]\d{1,2}:\d{2}(?::\d{2})?(?:\s+[A-Za-z]{2,5})?\]\s*"
)
# [[reply_to_current]]
_LEADING_REPLY_MARKER = re.compile(r"^\[\[[^\]]*\]\]\s*")
# [message_id: 3A77687B7B36ACF62A66]
_TRAILING_MESSAGE_ID = re.compile(r"\s*\[(?:message_id|msg_id):\s*[^\]]+\]\s*$", re.IGNORECASE)

_RECALL_CONTEXT = re.compile(
    re.escape(CONTEXT_START) + r".*?" + re.escape(CONTEXT_END) + r"\s*", re.DOTALL
)


def is_system_noise(text: str) -> bool:
    """True when the whole message is a gateway or session lifecycle notice."""
    stripped = text.strip()
    return any(p.match(stripped) for p in _NOISE_PATTERNS)


def clean_envelope(text: str) -> str:
    """Strip transport headers, reply markers and message ids from the edges.

    Bracketed text anywhere else in the message is left alone.
    """
    cleaned = _LEADING_HEADER.sub("", text, count=1)
    cleaned = _LEADING_REPLY_MARKER.sub("", cleaned, count=1)
    cleaned = _TRAILING_MESSAGE_ID.sub("", cleaned, count=1)
    return cleaned.strip()


def strip_recall_context(text: str) -> str:
    """Remove previously injected recall context blocks."""
    return _RECALL_CONTEXT.sub("", text).strip()


def is_too_short(text: str) -> bool:
    return len(text) < MIN_CONTENT_LENGTH
