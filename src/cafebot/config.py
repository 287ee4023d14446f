"""Configuration management for cafebot."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cafebot.dispatcher import SUGGESTED_QUERIES


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CAFEBOT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # State
    state_dir: Path | None = Field(None, description="Directory for JSON state files; in-memory when unset")

    # Dispatch
    suggested_queries: list[str] = Field(
        default_factory=lambda: list(SUGGESTED_QUERIES),
        description="Follow-up queries offered after a dialog completes",
    )

    # Logging
    log_level: str | None = Field(None, description="Log level; INFO for commands, WARNING in chat when unset")


def get_settings(**overrides: object) -> Settings:
    """Load settings from the environment and ``.env``, applying explicit overrides."""

    return Settings(**overrides)
