"""
Configuration module for the Channel Alert Bot.

This module uses Pydantic Settings to load and validate configuration from environment variables.
All settings are validated at startup time.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvBaseSettings(BaseSettings):
    """
    Base class for settings sections.

    Important: nested settings are instantiated independently (via default_factory),
    so each section must know how to load from `.env` as well.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class MatcherSettings(EnvBaseSettings):
    """Keyword matching engine settings."""

    max_keywords_length: int = Field(
        default=500, ge=1, description="Maximum length of a subscriber keyword specification"
    )
    max_message_length: int = Field(
        default=4096, ge=0, description="Maximum message length to evaluate (chars, 0 = unlimited)"
    )
    cache_expressions: bool = Field(
        default=True, description="Cache parsed keyword expressions by specification string"
    )
    expression_cache_size: int = Field(
        default=1024, ge=1, description="Number of parsed expressions to keep in memory"
    )

    model_config = SettingsConfigDict(
        env_prefix="MATCHER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class LoggingSettings(EnvBaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    json_logs: bool = Field(default=False, description="Enable JSON structured logging")
    log_file: Optional[Path] = Field(default=None, description="Path to log file")
    log_file_max_bytes: int = Field(default=10 * 1024 * 1024, description="Max log file size")
    log_file_backup_count: int = Field(default=5, description="Number of log file backups")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept lowercase level names and the common WARN alias."""
        if isinstance(v, str):
            v = v.strip().upper()
            if v == "WARN":
                return "WARNING"
        return v

    @field_validator("log_file")
    @classmethod
    def create_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        """Ensure log directory exists."""
        if v is not None:
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class AppSettings(EnvBaseSettings):
    """Main application settings."""

    environment: Literal["development", "production", "testing"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(EnvBaseSettings):
    """Root settings class that aggregates all configuration sections."""

    app: AppSettings = Field(default_factory=AppSettings)
    matcher: MatcherSettings = Field(default_factory=MatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # model_config inherited from EnvBaseSettings


# Singleton instance of settings
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the singleton settings instance.

    Returns:
        Settings: Application settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """
    Force reload settings from environment.

    Useful for testing or when environment variables change at runtime.

    Returns:
        Settings: Newly loaded settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
