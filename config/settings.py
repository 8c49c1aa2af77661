#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    CREDENTIALS_FILE,
    DEFAULT_SERVER_URL,
    FETCH_TIMEOUT_SECONDS,
    FETCH_USER_AGENT,
    LOG_LEVEL,
    MAX_UPLOAD_SIZE_MB,
    STREAM_TIMEOUT_SECONDS,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Server ==========
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = LOG_LEVEL
    cors_origins: List[str] = ["*"]

    # ========== Provider & Model ==========
    # Only a UI default; requests always carry provider, model and key
    default_provider: str = "openai"

    # ========== Streaming ==========
    stream_timeout_seconds: float = STREAM_TIMEOUT_SECONDS
    server_url: str = DEFAULT_SERVER_URL  # used by the CLI's HTTP transport

    # ========== Source Input ==========
    fetch_timeout_seconds: float = FETCH_TIMEOUT_SECONDS
    fetch_user_agent: str = FETCH_USER_AGENT
    max_upload_size_mb: int = MAX_UPLOAD_SIZE_MB

    # ========== Client-side Credentials ==========
    credentials_file: Path = BASE_DIR / CREDENTIALS_FILE

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow extra fields from .env that aren't defined in model
    )

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("max_upload_size_mb")
    @classmethod
    def upload_size_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_upload_size_mb must be at least 1")
        return v

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Settings accessor used as a FastAPI dependency."""
    return Settings()


# Global settings instance
settings = get_settings()
