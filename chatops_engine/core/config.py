"""
Configuration Settings.

This module defines the engine configuration using Pydantic's BaseSettings.
Values are bound from environment variables and an optional .env file without
explicit dotenv loading.
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class CommandDefaults(BaseModel):
    """Defaults applied to every newly declared command."""

    authority: int = Field(
        default=1, alias="CHATOPS_DEFAULT_AUTHORITY", description="Minimum authority required by a command"
    )
    max_depth: int = Field(
        default=64, alias="CHATOPS_MAX_DEPTH", description="Maximum length of a command's continuation queue"
    )

    model_config = {"populate_by_name": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", alias="CHATOPS_LOG_LEVEL", description="Console log level")
    format: str = Field(default="detailed", alias="CHATOPS_LOG_FORMAT", description="simple, detailed or json")
    enable_file: bool = Field(
        default=False, alias="CHATOPS_ENABLE_FILE_LOGGING", description="Also write logs to a file"
    )
    file_dir: str = Field(default="logs", alias="CHATOPS_LOG_FILE_DIR", description="Directory of the log file")

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Engine settings model.

    All properties are bound from environment variables and the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="CHATOPS_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="CHATOPS_LOG_FORMAT",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Whether to also write logs to a file",
        alias="CHATOPS_ENABLE_FILE_LOGGING",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory holding the log file",
        alias="CHATOPS_LOG_FILE_DIR",
    )

    # =====================================================================
    # Command Pipeline
    # =====================================================================
    max_depth: int = Field(
        default=64,
        ge=1,
        description="Maximum length of a command's continuation queue",
        alias="CHATOPS_MAX_DEPTH",
    )
    default_authority: int = Field(
        default=1,
        ge=0,
        description="Authority level required by commands that do not set one",
        alias="CHATOPS_DEFAULT_AUTHORITY",
    )

    # =====================================================================
    # Localization
    # =====================================================================
    default_locale: str = Field(
        default="en",
        description="Locale used when a session has no matching locale",
        alias="CHATOPS_DEFAULT_LOCALE",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def command_defaults(self) -> CommandDefaults:
        """Get the command defaults from environment variables."""
        return CommandDefaults.model_validate(self.model_dump(by_alias=True))

    @property
    def logging_config(self) -> LoggingConfig:
        """Get the logging configuration from environment variables."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
