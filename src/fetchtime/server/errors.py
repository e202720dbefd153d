"""Error types for server setup."""

from __future__ import annotations

from fetchtime.tools.errors import FetchTimeError


class ConfigError(FetchTimeError):
    """Raised when a server config file fails parsing or validation."""
