"""
config.py - Environment-driven settings via pydantic-settings

Every setting can be overridden with an ASSETTRANSFER_* environment variable
or a .env file. get_settings() is cached, one instance per process; tests
build Settings directly instead of mutating the cached one.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Contract settings."""

    model_config = SettingsConfigDict(
        env_prefix="ASSETTRANSFER_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"

    # Require the caller to own an asset before update, delete or transfer.
    enforce_asset_owner: bool = False

    # Write the sample assets in init_ledger.
    seed_assets: bool = True

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log_level {v!r}")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
