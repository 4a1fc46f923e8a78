# library_catalog/config.py
"""
Runtime settings for the catalogue service.

Every value can be overridden through an environment variable carrying
the ``LIBRARY_CATALOG_`` prefix (for example ``LIBRARY_CATALOG_PORT``)
or through a local ``.env`` file.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SAMPLE_FILE = Path(__file__).resolve().parent / "data" / "sample_books.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Library Catalog API"
    app_version: str = "1.0.0"

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"

    # Length of a loan, used to compute ``returnDate`` on borrow.
    loan_period_days: int = Field(default=14, ge=1)

    default_page: int = Field(default=1, ge=1)
    default_limit: int = Field(default=10, ge=1)

    seed_sample_data: bool = True
    sample_data_file: Path = DEFAULT_SAMPLE_FILE

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
