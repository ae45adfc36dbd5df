"""Base types for the tool-calling framework."""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these. ``text`` is the human-readable reply
    shown to the agent; ``data`` carries structured details.
    """

    text: str = ""
    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_content(self) -> str:
        """Serialize for a tool_result content field."""
        if self.error:
            return json.dumps({"error": self.error})
        return json.dumps({"text": self.text, **(self.data or {})})


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Subclass with Field() definitions. The JSON schema is auto-generated
    via model_json_schema() for tool definitions.
    """

