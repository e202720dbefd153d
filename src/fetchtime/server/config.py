"""Server configuration from defaults, an optional YAML file and the environment.

Precedence, highest first: explicit overrides (CLI options), environment
variables, the YAML file, built-in defaults.

Environment variables::

    MCP_SERVER_HOST / FETCHTIME_HOST
    MCP_SERVER_PORT / FETCHTIME_PORT
    CACHE_ENABLED   / FETCHTIME_ENABLE_CACHING
    LOG_LEVEL       / FETCHTIME_LOG_LEVEL
    FETCHTIME_ENABLE_WEBSOCKET, FETCHTIME_MAX_MESSAGE_SIZE, ...
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Literal

import yaml
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fetchtime.server.errors import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ServerConfig(BaseSettings):
    """Settings shared by the HTTP, WebSocket and stdio transports."""

    model_config = SettingsConfigDict(
        env_prefix="FETCHTIME_",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("MCP_SERVER_HOST", "FETCHTIME_HOST"),
    )
    port: int = Field(
        default=3000,
        ge=0,
        le=65535,
        validation_alias=AliasChoices("MCP_SERVER_PORT", "FETCHTIME_PORT"),
    )
    enable_websocket: bool = True
    enable_caching: bool = Field(
        default=True,
        validation_alias=AliasChoices("CACHE_ENABLED", "FETCHTIME_ENABLE_CACHING"),
    )
    max_connections: int = Field(default=100, gt=0)
    idle_timeout_ms: int = Field(default=30000, gt=0, description="Idle connection timeout")
    max_message_size: int = Field(default=65536, gt=0, description="Max WebSocket frame in bytes")
    enable_metrics: bool = True
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "FETCHTIME_LOG_LEVEL"),
    )
    telemetry_enabled: bool = False
    otlp_endpoint: str | None = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def idle_timeout_seconds(self) -> float:
        return self.idle_timeout_ms / 1000


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a plain mapping.

    ``${VAR}`` and ``$VAR`` references are expanded with
    :func:`os.path.expandvars` before parsing.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or is not
            a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")
    return data


def load_config(path: Path | None = None, **overrides: Any) -> ServerConfig:
    """Build a :class:`ServerConfig` from *path*, the environment and *overrides*.

    Overrides whose value is ``None`` are ignored, so unset CLI options fall
    through to the lower layers.

    Raises:
        ConfigError: On an unreadable file or a value failing validation.
    """
    file_values = read_config_file(path) if path is not None else {}
    explicit = {key: value for key, value in overrides.items() if value is not None}

    try:
        from_env = ServerConfig()
        env_values = from_env.model_dump(include=from_env.model_fields_set)
        # model_validate skips the settings sources, so the merge order holds
        config = ServerConfig.model_validate({**file_values, **env_values, **explicit})
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    if path is not None:
        logger.info("Loaded configuration from %s", path)
    return config
