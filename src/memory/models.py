"""Data models for transcripts, host events, and recalled memories."""

import logging
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    OTHER = "other"


class Category(StrEnum):
    """Semantic labels attached to stored memories."""

    PREFERENCE = "preference"
    FACT = "fact"
    DECISION = "decision"
    TASK = "task"
    EVENT = "event"
    ENTITY = "entity"
    OTHER = "other"


# -- Content blocks ----------------------------------------------------------


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class OtherBlock(BaseModel):
    """Any non-text block (image, tool_use, tool_result, ...). Dropped on flatten."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str


ContentBlock = TextBlock | OtherBlock


class Turn(BaseModel):
    """A single message in a transcript."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str | tuple[ContentBlock, ...] = ""
    timestamp: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Role:
        try:
            return Role(value)
        except ValueError:
            return Role.OTHER

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple)):
            blocks: list[ContentBlock] = []
            for item in value:
                if isinstance(item, (TextBlock, OtherBlock)):
                    blocks.append(item)
                elif not isinstance(item, dict):
                    continue
                elif item.get("type") == "text" and isinstance(item.get("text"), str):
                    blocks.append(TextBlock(text=item["text"]))
                else:
                    blocks.append(OtherBlock(type=str(item.get("type", "unknown"))))
            return tuple(blocks)
        return ""


Transcript = list[Turn]


# -- Host events -------------------------------------------------------------


def _parse_turns(raw: Any) -> list[Turn]:
    if not isinstance(raw, (list, tuple)):
        return []
    turns = []
    for item in raw:
        if isinstance(item, Turn):
            turns.append(item)
        elif isinstance(item, dict) and "role" in item:
            try:
                turns.append(Turn.model_validate(item))
            except PydanticValidationError:
                logger.debug("Skipping invalid transcript item")
        else:
            logger.debug("Skipping malformed transcript item: %s", type(item).__name__)
    return turns


class CaptureEvent(BaseModel):
    """Fired by the host after an agent turn finishes."""

    success: bool = False
    messages: list[Turn] = Field(default_factory=list)

    @field_validator("messages", mode="before")
    @classmethod
    def _messages(cls, value: Any) -> list[Turn]:
        return _parse_turns(value)


class RecallEvent(BaseModel):
    """Fired by the host before an agent turn starts."""

    prompt: str | None = None
    messages: list[Turn] = Field(default_factory=list)

    @field_validator("prompt", mode="before")
    @classmethod
    def _prompt(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("messages", mode="before")
    @classmethod
    def _messages(cls, value: Any) -> list[Turn]:
        return _parse_turns(value)


def parse_capture_event(raw: Any) -> CaptureEvent:
    if isinstance(raw, CaptureEvent):
        return raw
    if not isinstance(raw, dict):
        return CaptureEvent()
    return CaptureEvent(success=raw.get("success") is True, messages=raw.get("messages"))


def parse_recall_event(raw: Any) -> RecallEvent:
    if isinstance(raw, RecallEvent):
        return raw
    if not isinstance(raw, dict):
        return RecallEvent()
    return RecallEvent(prompt=raw.get("prompt"), messages=raw.get("messages"))


# -- Store results -----------------------------------------------------------


class StoredMemory(BaseModel):
    """Identifier returned by the memory store after an add."""

    id: str


class RecallResult(BaseModel):
    """A memory retrieved from the store, best-ranked first."""

    id: str
    content: str
    similarity: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
