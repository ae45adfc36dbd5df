"""Input hygiene applied before anything reaches the memory store."""

import math
import re
from typing import Any

from src.memory.errors import ValidationError

MAX_CONTENT_LENGTH = 100_000
MAX_METADATA_KEYS = 50
MAX_KEY_LENGTH = 128
MAX_VALUE_LENGTH = 1024
MAX_COLLECTION_NAME_LENGTH = 100

_CONTROL_CHAR_PATTERNS = [
    re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]"),  # C0 controls, keeps \t \n \r
    re.compile(r"\uFEFF"),  # zero-width no-break space
    re.compile(r"[\uFFF0-\uFFFF]"),  # specials block
]

_METADATA_KEY = re.compile(r"^[\w.-]+$")
_COLLECTION_NAME = re.compile(r"^[a-zA-Z0-9_-]+$")

MetadataValue = str | int | float | bool


def sanitize_content(content: Any, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """Strip control characters and cap length. Non-strings become ``""``."""
    if not content or not isinstance(content, str):
        return ""

    cleaned = content
    for pattern in _CONTROL_CHAR_PATTERNS:
        cleaned = pattern.sub("", cleaned)

    return cleaned[:max_length]


def validate_content_length(
    content: str,
    min_length: int = 1,
    max_length: int = MAX_CONTENT_LENGTH,
) -> None:
    """Raise ValidationError when content is outside the allowed length."""
    if len(content) < min_length:
        msg = f"content below minimum length ({min_length})"
        raise ValidationError(msg)
    if len(content) > max_length:
        msg = f"content exceeds maximum length ({max_length})"
        raise ValidationError(msg)


def sanitize_metadata(metadata: dict[str, Any] | None) -> dict[str, MetadataValue]:
    """Keep at most 50 scalar entries with well-formed keys.

    Strings are truncated to 1024 characters; non-finite numbers and
    non-scalar values are dropped.
    """
    result: dict[str, MetadataValue] = {}
    for key, value in (metadata or {}).items():
        if len(result) >= MAX_METADATA_KEYS:
            break
        if not isinstance(key, str) or len(key) > MAX_KEY_LENGTH:
            continue
        if not _METADATA_KEY.match(key):
            continue

        if isinstance(value, str):
            result[key] = value[:MAX_VALUE_LENGTH]
        elif isinstance(value, bool):
            result[key] = value
        elif isinstance(value, (int, float)) and math.isfinite(value):
            result[key] = value
    return result


def validate_api_key_format(api_key: Any) -> None:
    """Raise ValidationError for keys that are obviously malformed."""
    if not api_key or not isinstance(api_key, str):
        msg = "API key is empty or not a string"
        raise ValidationError(msg)
    if len(api_key) < 10:
        msg = "API key is too short"
        raise ValidationError(msg)
    if re.search(r"\s", api_key):
        msg = "API key contains whitespace"
        raise ValidationError(msg)


def validate_collection_name(name: Any) -> None:
    """Raise ValidationError when a collection name is not storage-safe."""
    if not name or not isinstance(name, str):
        msg = "name is empty"
        raise ValidationError(msg)
    if len(name) > MAX_COLLECTION_NAME_LENGTH:
        msg = f"name exceeds {MAX_COLLECTION_NAME_LENGTH} characters"
        raise ValidationError(msg)
    if not _COLLECTION_NAME.match(name):
        msg = "name contains invalid characters (only alphanumeric, underscore, hyphen allowed)"
        raise ValidationError(msg)
    if name[0] in "-_" or name[-1] in "-_":
        msg = "name must not start or end with - or _"
        raise ValidationError(msg)
