"""
initializable/core/config.py
Configuration management using Pydantic Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Literal, Optional


class Settings(BaseSettings):
    """
    Lifecycle Configuration
    Environment variables (INITIALIZABLE_*) can override these defaults
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INITIALIZABLE_",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # Lifecycle Settings
    # ========================================================================
    INIT_TIMEOUT_SECONDS: float = Field(default=50.0, gt=0)  # default timeout_limit
    FORCE_READY_MESSAGE: str = "Interrupt initialization"

    # ========================================================================
    # Logging Settings
    # ========================================================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"

    # ========================================================================
    # Validators
    # ========================================================================

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v):
        """Accept lower-case level names from the environment"""
        if isinstance(v, str):
            return v.upper()
        return v


# ============================================================================
# Singleton Pattern - Global Settings Instance
# ============================================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create settings instance (Singleton)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment (testing only)."""
    global _settings
    _settings = None


# ============================================================================
# Export
# ============================================================================

__all__ = ["Settings", "get_settings", "reset_settings"]
