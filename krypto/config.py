"""
Configuration settings for krypto.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .srs.errors import InvalidThreshold
from .srs.models import MasteryThresholds

DEFAULT_DB_PATH = Path.home() / ".krypto" / "state.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DB_PATH}",
        description="SQLAlchemy connection string for the item store",
    )
    store_backend: Literal["sql", "memory"] = Field(
        default="sql",
        description="Item store implementation",
    )
    catalog_path: str | None = Field(
        default=None,
        description="JSON catalogue replacing the built-in item universe",
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

    # ========================================
    # Mastery Thresholds
    # ========================================
    mastery_min_reviews: int = Field(
        default=5,
        description="Minimum reviews before an item can count as mastered",
    )
    mastery_min_accuracy_percent: float = Field(
        default=80.0,
        description="Minimum lifetime accuracy (percent) for mastery",
    )
    mastery_min_interval_days: int = Field(
        default=7,
        description="Minimum current interval (days) for mastery",
    )

    # ========================================
    # Review Sessions
    # ========================================
    quiz_size: int = Field(
        default=10,
        description="Items per mixed review batch",
    )
    new_item_ratio: float = Field(
        default=0.3,
        description="Maximum share of never-seen items in a batch (0-1)",
    )

    # ─── Unlock Gates ───────────────────────────────────────────────────────────
    noun_unlock_percent: float = Field(
        default=80.0,
        description="Percent of letters mastered before noun endings open",
    )
    verb_unlock_percent: float = Field(
        default=70.0,
        description="Percent of noun endings mastered before verb endings open",
    )

    def get_mastery_thresholds(self) -> MasteryThresholds:
        """Build mastery thresholds (raises InvalidThreshold on bad values)."""
        return MasteryThresholds(
            min_reviews=self.mastery_min_reviews,
            min_accuracy_percent=self.mastery_min_accuracy_percent,
            min_interval_days=self.mastery_min_interval_days,
        )

    def validate_session_config(self) -> None:
        """Reject batch and unlock settings the engine cannot use."""
        if self.quiz_size <= 0:
            raise InvalidThreshold("quiz_size", self.quiz_size)
        if not 0.0 <= self.new_item_ratio <= 1.0:
            raise InvalidThreshold("new_item_ratio", self.new_item_ratio, "must be within [0, 1]")
        for name in ("noun_unlock_percent", "verb_unlock_percent"):
            value = getattr(self, name)
            if not 0 < value <= 100:
                raise InvalidThreshold(name, value, "must be in (0, 100]")

    def get_engine_config(self) -> dict[str, object]:
        """Get engine configuration as a dictionary."""
        return {
            "store": {
                "backend": self.store_backend,
                "database_url": self.database_url,
                "catalog_path": self.catalog_path,
            },
            "mastery": {
                "min_reviews": self.mastery_min_reviews,
                "min_accuracy_percent": self.mastery_min_accuracy_percent,
                "min_interval_days": self.mastery_min_interval_days,
            },
            "session": {
                "quiz_size": self.quiz_size,
                "new_item_ratio": self.new_item_ratio,
            },
            "unlock": {
                "noun_percent": self.noun_unlock_percent,
                "verb_percent": self.verb_unlock_percent,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
