"""Environment-driven defaults."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WeftSettings(BaseSettings):
    """Defaults applied to every new Agent, overridable through ``WEFT_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="WEFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_model: str = "gpt-4.1"
    iterations: int = Field(default=120, ge=1)
    parallelism: int = 5
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache
def get_settings() -> WeftSettings:
    return WeftSettings()
