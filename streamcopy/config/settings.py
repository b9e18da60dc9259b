"""Copy settings with environment variable and YAML file support."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from streamcopy.core.errors import ConfigError


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CopySettings(BaseSettings):
    """Copy settings with automatic environment variable support.

    Precedence order (highest to lowest):
    1. Environment variables (STREAMCOPY_*)
    2. Constructor arguments (file data)
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMCOPY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Return sources in priority order: env > init > dotenv > file_secret."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    buffer_size: int = Field(
        default=64 * 1024,
        ge=1,
        description="Chunk size in bytes for each read/write cycle",
    )
    update_interval: int | None = Field(
        default=None,
        ge=1,
        description="Copied bytes between progress notifications (default 256 KiB)",
    )
    dynamic_update_interval: bool = Field(
        default=False,
        description="Derive the update interval from the source length",
    )

    # Logging
    log_level: str = "WARNING"
    log_file: Path | None = None
    json_logs: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        upper_v = v.strip().upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of {VALID_LOG_LEVELS}")
        return upper_v

    @model_validator(mode="after")
    def validate_interval_mode(self) -> "CopySettings":
        """An explicit interval and the dynamic interval cannot both be set."""
        if self.update_interval is not None and self.dynamic_update_interval:
            raise ValueError(
                "update_interval and dynamic_update_interval are mutually exclusive"
            )
        return self

    def get_log_level_int(self) -> int:
        """Get the log level as a stdlib logging integer."""
        return getattr(logging, self.log_level, logging.WARNING)  # type: ignore[no-any-return]


def load_settings(config_file: Path | str | None = None) -> CopySettings:
    """Load settings from an optional YAML file, environment and defaults.

    Args:
        config_file: Path of a YAML mapping with setting values

    Returns:
        Validated CopySettings

    Raises:
        ConfigError: If the file cannot be read or the values are invalid
    """
    data: dict[str, Any] = {}

    if config_file is not None:
        config_path = Path(config_file)
        try:
            with config_path.open(encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Config file {config_path} must contain a mapping, "
                f"got {type(loaded).__name__}"
            )
        data = loaded

    try:
        return CopySettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
