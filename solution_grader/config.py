"""
Configuration management for the Solution Grader.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
All configuration is validated at startup to fail fast on misconfiguration.
"""

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# A submission passes when its score reaches this value.
PASS_THRESHOLD = 70


class StoreBackend(str, Enum):
    """Persistence backend for graded submissions."""

    MEMORY = "memory"  # Process-local, lost on exit
    JSONL = "jsonl"  # Append-only JSON lines file in the data directory


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every variable is prefixed with ``GRADER_`` (e.g. ``GRADER_RECENT_LIMIT``).
    """

    model_config = SettingsConfigDict(
        env_prefix="GRADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Storage Configuration
    # ==========================================================================
    store_backend: StoreBackend = Field(
        default=StoreBackend.JSONL,
        description="Where graded submissions are persisted",
    )

    data_directory: Path = Field(
        default=Path("./data"),
        description="Directory holding the submission log and document catalog",
    )

    documents_file: Path | None = Field(
        default=None,
        description="JSON document catalog; defaults to <data_directory>/documents.json",
    )

    recent_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum number of submissions returned by the recent history query",
    )

    # ==========================================================================
    # Execution Configuration
    # ==========================================================================
    execution_timeout_seconds: float = Field(
        default=10.0,
        ge=0.1,
        le=300.0,
        description="Upper bound on the time a single check battery may take",
    )

    min_code_length: int = Field(
        default=50,
        ge=0,
        le=10_000,
        description="Submissions must be longer than this (after trimming) to be non-trivial",
    )

    placeholder_markers: tuple[str, ...] = Field(
        default=("TODO", "..."),
        description="Markers that flag a submission as unfinished",
    )

    # ==========================================================================
    # Orchestration Configuration
    # ==========================================================================
    task_cache_ttl_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=86_400.0,
        description="Lifetime of cached document lookups (0 disables the cache)",
    )

    serialize_per_key: bool = Field(
        default=False,
        description="Serialize grading calls for the same (user, document, task) key",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level name",
    )

    @field_validator("placeholder_markers")
    @classmethod
    def validate_placeholder_markers(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Drop empty markers, which would match every submission."""
        return tuple(marker for marker in v if marker)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("data_directory")
    @classmethod
    def validate_data_directory(cls, v: Path) -> Path:
        """Ensure data directory exists or can be created."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def catalog_path(self) -> Path:
        """Resolved location of the document catalog."""
        return self.documents_file or self.data_directory / "documents.json"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
