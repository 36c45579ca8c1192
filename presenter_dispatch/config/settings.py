import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from presenter_dispatch.dispatch.dispatcher import DEFAULT_MAX_LOOP, DispatcherConfig


__all__ = [
    "ConfigurationError",
    "DispatchSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class DispatchSettings(BaseModel):
    """Presenter dispatch configuration."""

    error_handler: str | None = Field(
        default=None,
        description="Name of the handler receiving failed dispatches (None disables recovery)",
    )

    catch_exceptions: bool = Field(
        default=True,
        description="Whether dispatch failures are recovered through the error handler",
    )

    max_loop: int = Field(
        default=DEFAULT_MAX_LOOP,
        description="Maximum number of forwards followed within one dispatch",
        ge=0,
    )

    @field_validator("error_handler")
    @classmethod
    def _blank_error_handler_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    def dispatcher_config(self) -> DispatcherConfig:
        return DispatcherConfig(max_loop=self.max_loop)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    json_logs: bool = Field(
        default=False,
        description="Render console logs as JSON",
    )

    file: str | None = Field(
        default=None,
        description="Path to a JSON log file",
    )

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown logging level: {value}")
        return level


class Settings(BaseSettings):
    """
    Settings for the presenter dispatch adapter.

    Values are read from environment variables prefixed with ``PRESENTER_``
    (nested fields use ``__``, e.g. ``PRESENTER_DISPATCH__ERROR_HANDLER``)
    and from a ``.env`` file. ``from_toml`` loads a TOML file instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRESENTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    dispatch: DispatchSettings = Field(
        default_factory=DispatchSettings,
        description="Dispatch and recovery configuration",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {toml_path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {toml_path}: {e}") from e

    @classmethod
    def from_toml(cls, toml_path: Path | str, **kwargs: Any) -> "Settings":
        """Load settings from a TOML file, with ``kwargs`` taking precedence."""
        config_data = cls.load_toml_config(Path(toml_path))
        config_data.update(kwargs)
        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {toml_path}: {e}") from e


def get_settings(**overrides: Any) -> Settings:
    """Build settings from the environment.

    Raises:
        ConfigurationError: If the environment holds invalid values
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
