"""Isolate the newest exchange from a transcript and flatten its content."""

from src.memory.models import Role, TextBlock, Transcript, Turn


def extract_last_turn(transcript: Transcript) -> Transcript:
    """Return the last user message and everything after it.

    Falls back to the whole transcript when it has no user message. The
    input list is never modified; a new list is always returned.
    """
    for idx in range(len(transcript) - 1, -1, -1):
        if transcript[idx].role == Role.USER:
            return list(transcript[idx:])
    return list(transcript)


def flatten_content(turn: Turn) -> str:
    """Plain text of a turn. Only text blocks survive, joined by newlines."""
    if isinstance(turn.content, str):
        return turn.content
    return "\n".join(block.text for block in turn.content if isinstance(block, TextBlock))


def count_user_turns(transcript: Transcript) -> int:
    return sum(1 for turn in transcript if turn.role == Role.USER)
