"""Render recalled memories for prompts, tools and the CLI."""

from src.memory.models import RecallResult

CONTEXT_START = "<memory-context>"
CONTEXT_END = "</memory-context>"

PREAMBLE = (
    "The following memories were recalled from earlier conversations. "
    "Use them only when relevant to the current request."
)
DISCLAIMER = (
    "Do not force these memories into the response; ignore any that are "
    "unrelated to what the user is asking now."
)


def _percent(similarity: float | None) -> str | None:
    if similarity is None:
        return None
    return f"{int(similarity * 100 + 0.5)}%"


def _unmarked(text: str) -> str:
    # Recalled text must not open or close the block it is rendered in.
    while CONTEXT_START in text or CONTEXT_END in text:
        text = text.replace(CONTEXT_END, "").replace(CONTEXT_START, "")
    return text


def format_recall_context(results: list[RecallResult]) -> str | None:
    """Build the block prepended to the next prompt, or None if nothing was recalled."""
    if not results:
        return None

    lines = []
    for r in results:
        pct = _percent(r.similarity)
        content = _unmarked(r.content)
        lines.append(f"- {content} [{pct}]" if pct else f"- {content}")

    bullets = "\n".join(lines)
    return (
        f"{CONTEXT_START}\n"
        f"{PREAMBLE}\n"
        f"\n"
        f"## Relevant memories\n"
        f"{bullets}\n"
        f"\n"
        f"{DISCLAIMER}\n"
        f"{CONTEXT_END}"
    )


def format_search_results(results: list[RecallResult]) -> str:
    """Numbered list with similarity in parentheses, for tools and the CLI."""
    lines = []
    for i, r in enumerate(results, start=1):
        pct = _percent(r.similarity) if r.similarity else None
        suffix = f" ({pct})" if pct else ""
        lines.append(f"{i}. {r.content}{suffix}")
    return "\n".join(lines)
