"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `AUTHORFLOW_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """AuthorFlow settings.

    All fields are environment-configurable. Prefix is `AUTHORFLOW_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHORFLOW_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    app_env: Literal["dev", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")

    # LLM
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    # Model used with the hosted web-search tool for grounded research
    openai_search_model: str = Field(default="gpt-4o-mini")
    openai_timeout_s: float = Field(default=120.0)
    # Agent calls are never retried by the workflow; this only tunes the SDK transport
    openai_max_retries: int = Field(default=0, ge=0, le=10)

    # Agents
    outliner_temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    parser_temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    writer_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Research
    research_max_results: int = Field(default=3, ge=1, le=10)
    research_placeholder_url: str = Field(default="#")
    research_default_summary: str = Field(default="No summary available.")

    # Persistence
    projects_dir: Path = Field(default=Path("projects"))
    notifications_path: Path | None = Field(default=None)
    # Notifications kept in memory for polling clients; older ones drop off
    notification_history: int = Field(default=500, ge=1)


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("AUTHORFLOW_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
