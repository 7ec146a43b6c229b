"""
Client configuration.

Values come from, in order of precedence: constructor arguments, environment
variables prefixed with 'CONVERSATION_SYNC_', and a '.env' file.

Usage:
    from conversation_sync.config import Settings, configure_logging

    settings = Settings()
    configure_logging(settings.log_level)
"""

import sys

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CONVERSATION_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    graphql_url: str | None = Field(default=None, description="GraphQL endpoint of the chat store")
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    read_cache_seconds: float = Field(default=2.0, ge=0, description="Lifetime of cached non-fresh message reads")
    poll_interval_seconds: float = Field(default=5.0, gt=0)
    preview_length: int = Field(default=50, ge=1)
    restore_draft_on_failure: bool = Field(
        default=False,
        description="Put the typed text back into the draft when the user message could not be stored",
    )
    log_level: str = "INFO"


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
