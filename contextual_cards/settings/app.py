"""Card manager settings powered by Pydantic BaseSettings."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CardSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CONTEXTUAL_CARDS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    load_timeout_ms: float | None = Field(
        default=None,
        gt=0,
        description="Discard load completions slower than this (None disables)",
    )
    loader_max_workers: int = Field(
        default=4, ge=1, description="Parallel card sources per load"
    )
    stable_reload: bool = Field(
        default=False,
        description="After the first pass, reloads keep only cards already shown",
    )
    validate_producer_updates: bool = Field(
        default=True, description="Reject producer batches that break ownership"
    )
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    @property
    def log_level_value(self) -> int:
        """Return the numeric logging level."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> CardSettings:
    """Get a settings instance."""
    return CardSettings()
