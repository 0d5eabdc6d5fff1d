"""
Configuration settings for the exam simulator.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with EXAMSIM_ (e.g. EXAMSIM_DATA_DIR).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EXAMSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Bank & Packs
    # ========================================
    bank_path: Path = Field(
        default=Path("data/economics_exam_bank_v1.json"),
        description="Path of the question bank document",
    )
    bank_url: str | None = Field(
        default=None,
        description="Remote bank URL (takes precedence over bank_path when set)",
    )
    pack_dir: Path | None = Field(
        default=None,
        description="Directory of supplementary pack documents (*.json)",
    )

    # ========================================
    # Persistence
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".examsim",
        description="Root directory for persisted sessions and review state",
    )
    history_limit: int = Field(
        default=20,
        ge=1,
        description="Number of most recent sessions kept in history",
    )

    # ========================================
    # Selection
    # ========================================
    review_session_limit: int = Field(default=10, ge=1)
    drill_count: int = Field(default=10, ge=1)
    exam1_question_count: int = Field(default=20, ge=1)
    exam1_category_cap: int = Field(
        default=8,
        ge=1,
        description="Max questions per topic category in an exam-1 MCQ session",
    )
    full_sim1_question_count: int = Field(default=20, ge=1)
    full_sim1_multi_cap: int = Field(
        default=3,
        ge=0,
        description="Max multi-choice questions in full simulation 1",
    )
    full_sim1_source_prefixes: list[str] = Field(
        default_factory=lambda: ["MCQ-", "MCQM-", "FS1-"],
        description="Question id prefixes eligible for full simulation 1",
    )

    # ========================================
    # Timing
    # ========================================
    exam1_time_limit_minutes: int = Field(default=25, ge=1)
    exam2_time_limit_minutes: int = Field(default=50, ge=1)
    legacy_time_limit_minutes: int = Field(default=50, ge=1)
    pace_threshold_seconds: int = Field(
        default=120,
        ge=0,
        description="Tolerance window around the pacing baseline",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
