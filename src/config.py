"""Application settings loaded from environment variables."""

import os
import re
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


def sanitize_tag(raw: str) -> str:
    """Collapse anything outside ``[A-Za-z0-9_]`` into single underscores."""
    tag = re.sub(r"[^a-zA-Z0-9_]", "_", raw)
    tag = re.sub(r"_+", "_", tag)
    return tag.strip("_")


class Settings(BaseSettings):
    """Memory bridge configuration. All values come from environment variables."""

    # Mem0
    mem0_api_key: str = Field(default="")
    memory_collection: str = Field(default="agent_memory")

    # Hooks
    auto_recall: bool = Field(default=True)
    auto_capture: bool = Field(default=True)

    # Capture
    # "all" strips previously injected recall context before storing.
    capture_mode: Literal["all", "everything"] = Field(default="all")

    # Recall
    recall_limit: int = Field(default=5)
    recall_min_prompt_length: int = Field(default=5)

    # Conversation tracking
    session_fallback_policy: Literal["shared", "per_entry_point"] = Field(default="shared")
    conversation_ttl_seconds: int = Field(default=0)
    conversation_max_sessions: int = Field(default=0)

    # Logging
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_collection_name(self) -> str:
        """Collection name reduced to a storage-safe tag."""
        return sanitize_tag(self.memory_collection) or "agent_memory"

    def get_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


settings = Settings()
