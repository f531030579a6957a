"""Environment-based settings for tablecheck.

Loaded from environment variables with the TABLECHECK_ prefix (and an
optional .env file). Command-line flags take precedence.

Example:
    >>> # TABLECHECK_DATA_DIR=/srv/exports
    >>> # TABLECHECK_LOG_LEVEL=DEBUG
    >>> settings = CheckSettings()
    >>> settings.data_dir
    '/srv/exports'
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tablecheck.lib.errors import ConfigurationError

__all__ = ["CheckSettings", "load_settings"]


class CheckSettings(BaseSettings):
    """Defaults for locating and reading table files, and for logging."""

    data_dir: Optional[str] = Field(default=None, description="Directory holding one file per table")
    extension: str = Field(default=".csv", description="File extension appended to table names")
    delimiter: str = Field(default=",", description="Field delimiter of the table files")
    encoding: str = Field(default="utf-8", description="Text encoding of the table files")
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(default="console", description="Log format: 'json' or 'console'")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    model_config = SettingsConfigDict(
        env_prefix="TABLECHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """A delimiter is exactly one character."""
        if len(v) != 1:
            raise ValueError("delimiter must be a single character")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate format is a known value."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()


def load_settings(**overrides: Any) -> CheckSettings:
    """Build settings from the environment, applying non-None ``overrides``.

    Raises:
        ConfigurationError: If any setting is invalid
    """
    try:
        return CheckSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(f"Invalid setting: {first['msg']}", field=field) from e
