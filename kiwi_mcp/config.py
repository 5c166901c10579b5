from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    kiwi_api_key: str = Field(..., alias="KIWI_API_KEY")
    kiwi_base_url: str = Field(
        default="https://api.tequila.kiwi.com/v2", alias="KIWI_BASE_URL"
    )
    request_timeout: int = Field(default=30, alias="REQUEST_TIMEOUT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("kiwi_api_key")
    @classmethod
    def _key_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("KIWI_API_KEY must be a non-empty string")
        return v.strip()

    @field_validator("kiwi_base_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def _timeout_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {v!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return server settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]
