"""Configuration for the task runner."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runner settings, read from TASKERIE_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKERIE_",
        extra="ignore",
    )

    # Task file
    config_path: Path = Field(default=Path("taskerie.yaml"))

    # Shell used to run commands; None means the platform default (/bin/sh)
    shell: str | None = Field(default=None)

    # Decoding of command output
    output_encoding: str = Field(default="utf-8")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")


def get_settings() -> Settings:
    """Get a settings instance from the current environment."""
    return Settings()
