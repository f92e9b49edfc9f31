"""Configuration settings using Pydantic Settings.

Provides typed defaults for the singleton factory and logging, overridable
through environment variables.

Usage:
    from multistore.config import StoreSettings

    # Load from environment variables (MULTISTORE_*)
    settings = StoreSettings()

    # Or override with explicit values
    settings = StoreSettings(singleton_timeout_ms=2_000)
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):  # type: ignore[misc]
    """Process-wide defaults for multistore.

    Attributes:
        singleton_timeout_ms: How long callers wait for another caller's
            singleton construction. 0 waits forever.
        singleton_poll_interval_ms: Polling interval while waiting.
        log_level: Minimum structlog level.
        log_format: "console" for humans, "json" for log shippers.

    Environment Variables:
        MULTISTORE_SINGLETON_TIMEOUT_MS
        MULTISTORE_SINGLETON_POLL_INTERVAL_MS
        MULTISTORE_LOG_LEVEL
        MULTISTORE_LOG_FORMAT
    """

    model_config = SettingsConfigDict(
        env_prefix="MULTISTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    singleton_timeout_ms: int = Field(default=10_000, ge=0)
    singleton_poll_interval_ms: int = Field(default=100, gt=0)
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "console"
