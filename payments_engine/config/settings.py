"""
Configuration Management for the Payments Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Command-line flags override these values; they never bypass validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Replay and output settings.

    Loads configuration from PAYMENTS_ENGINE_* environment variables
    and the .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Output
    output_precision: int = Field(
        default=4,
        ge=4,
        le=28,
        description="Fractional digits written for each balance"
    )
    account_order: Literal["ascending", "first_seen"] = Field(
        default="ascending",
        description="Order of accounts in the final snapshot"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Minimum level for diagnostics on stderr"
    )
    log_json: bool = Field(
        default=True,
        description="Render diagnostics as JSON lines"
    )

    # Audit retention
    audit_retention: int = Field(
        default=10000,
        ge=0,
        description="How many audit events to keep in memory (0 disables)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
