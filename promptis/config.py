"""Application settings and the runtime prompt directory setting."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from promptis.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Strongly typed application configuration."""

    prompt_directory: str = Field(default="", alias="PROMPT_DIRECTORY")
    prompt_encoding: str = Field(default="utf-8", alias="PROMPT_ENCODING")
    participant_id: str = Field(default="promptis.promptis", alias="PARTICIPANT_ID")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", alias="OPENAI_BASE_URL"
    )
    chat_model: str = Field(default="gpt-4o-mini", alias="CHAT_MODEL")
    chat_system_prompt: str = Field(
        default="You are a helpful assistant.", alias="CHAT_SYSTEM_PROMPT"
    )
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", alias="LOG_LEVEL"
    )
    log_json: bool = Field(default=True, alias="LOG_JSON")
    port: int = Field(default=8000, alias="PORT")
    ws_inactivity_timeout: float = Field(
        default=300.0, alias="WS_INACTIVITY_TIMEOUT", description="Seconds"
    )
    chat_timeout: float = Field(default=60.0, alias="CHAT_TIMEOUT")
    chat_history_turns: int = Field(default=20, ge=0, alias="CHAT_HISTORY_TURNS")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @property
    def chat_enabled(self) -> bool:
        """Whether a chat backend is configured."""

        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of settings."""

    return Settings()


class ConfigurationStore:
    """Holds the ``promptDirectory`` value for the lifetime of the process.

    The batch executor only reads it; the directory picker command is the
    single writer and may only store an absolute path to an existing
    directory.
    """

    def __init__(self, prompt_directory: str = "") -> None:
        self._prompt_directory = prompt_directory

    @property
    def prompt_directory(self) -> str:
        return self._prompt_directory

    def update_prompt_directory(self, path: str) -> str:
        """Validate and store a new prompt directory, returning it."""

        candidate = Path(path)
        if not candidate.is_absolute():
            raise ConfigurationError(
                f"Prompt directory must be an absolute path: {path}", status_code=400
            )
        if not candidate.is_dir():
            raise ConfigurationError(
                f"Prompt directory does not exist: {path}", status_code=400
            )

        self._prompt_directory = str(candidate)
        logger.info("Prompt directory updated", extra={"prompt_directory": path})
        return self._prompt_directory
