"""Keyword heuristics that label memories for later filtering.

Checks run in order and the first match wins. A wrong label only affects
grouping, never whether something gets stored.
"""

import re

from src.memory.models import Category

MEMORY_CATEGORIES: list[str] = [c.value for c in Category]

DEFAULT_CATEGORY = Category.OTHER

_RULES: list[tuple[re.Pattern[str], Category]] = [
    (
        re.compile(
            r"\b(prefer(s|red)?|favou?rite|i (really )?(like|love|hate|dislike|enjoy)|"
            r"rather than|instead of)\b",
            re.IGNORECASE,
        ),
        Category.PREFERENCE,
    ),
    (
        re.compile(
            r"\b(decided|decision|we('ll| will) go with|chose|chosen|agreed to|settled on)\b",
            re.IGNORECASE,
        ),
        Category.DECISION,
    ),
    (
        re.compile(
            r"\b(todo|to-do|remind me|need to|have to|must|deadline|follow up|action item)\b",
            re.IGNORECASE,
        ),
        Category.TASK,
    ),
    (
        re.compile(
            r"\b(meeting|appointment|tomorrow|yesterday|next (week|month)|on (monday|tuesday|"
            r"wednesday|thursday|friday|saturday|sunday)|birthday|anniversary)\b"
            r"|\b\d{4}-\d{2}-\d{2}\b",
            re.IGNORECASE,
        ),
        Category.EVENT,
    ),
    (
        re.compile(
            r"[\w.+-]+@[\w-]+\.[\w.]+|\+?\d[\d\s().-]{7,}\d|"
            r"\b(phone|email|address|works at|colleague|manager|wife|husband|partner)\b",
            re.IGNORECASE,
        ),
        Category.ENTITY,
    ),
    (
        re.compile(
            r"\b(i am|i'm|my name is|i live|i work|is called|is located|born in|"
            r"always|never)\b",
            re.IGNORECASE,
        ),
        Category.FACT,
    ),
]


def classify(text: str) -> Category:
    """Label ``text`` with the first matching category."""
    for pattern, category in _RULES:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY
