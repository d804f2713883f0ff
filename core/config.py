# =============================================================================
# core/config.py - Engine Settings
# =============================================================================
# This module loads configuration from environment variables using
# pydantic-settings. It provides a single Settings class with the tunables
# of the validation engine (thresholds, sampling limits, drift injection).
#
# Usage:
#   from core.config import get_settings
#   threshold = get_settings().NULL_RATE_THRESHOLD
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Every setting has a default: the engine is a library and must work with no
# environment at all.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Accessed via get_settings(), which parses and validates once.
    """

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    NULL_RATE_THRESHOLD: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Profile null rate above which PROFILE_HIGH_NULL_RATE is raised"
    )

    UNIT_TOOL_DEFAULT: bool = Field(
        default=False,
        description="Strip unit tokens from numeric strings unless told otherwise"
    )

    # -------------------------------------------------------------------------
    # Profiling
    # -------------------------------------------------------------------------

    PROFILE_SAMPLE_LIMIT: int = Field(
        default=200,
        ge=1,
        description="Max non-empty values per column used for type/unit inference"
    )

    MAX_UNIT_CANDIDATES: int = Field(
        default=3,
        ge=1,
        le=3,
        description="Max unit candidates reported per column"
    )

    # -------------------------------------------------------------------------
    # Drift Injection
    # -------------------------------------------------------------------------

    HEADER_NOISE_RATE: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Probability a header is mangled by the header_noise drift"
    )

    TYPE_SHIFT_RATE: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Probability a cell is quoted by the type_shift drift"
    )

    DRIFT_SEED: int | None = Field(
        default=None,
        description="Seed for drift injection (None = non-deterministic)"
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level used by configure_logging()"
    )

    DEBUG: bool = Field(
        default=False,
        description="Force DEBUG logging"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once.
    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()
