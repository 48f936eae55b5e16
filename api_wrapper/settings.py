"""Environment-driven configuration for the API wrapper."""

import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from api_wrapper.connections import ConnectionRegistry
from api_wrapper.errors import ConfigurationError

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    connections: dict[str, Any] = field(default_factory=dict)
    api_timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally. ``API_CONNECTIONS`` holds an inline JSON
        object and takes precedence over ``API_CONNECTIONS_FILE``.
        """
        load_dotenv()

        connections_raw = os.getenv("API_CONNECTIONS", "").strip()
        connections_file = os.getenv("API_CONNECTIONS_FILE", "").strip()
        if connections_raw:
            registry = ConnectionRegistry.from_json(connections_raw)
        elif connections_file:
            registry = ConnectionRegistry.from_file(connections_file)
        else:
            registry = ConnectionRegistry()

        api_timeout_raw = os.getenv("API_TIMEOUT", "").strip() or str(DEFAULT_TIMEOUT)
        try:
            api_timeout = float(api_timeout_raw)
        except ValueError as exc:
            raise ConfigurationError(
                "API_TIMEOUT must be a numeric value.", code="INVALID_SETTINGS"
            ) from exc
        if api_timeout <= 0:
            raise ConfigurationError(
                "API_TIMEOUT must be greater than zero.", code="INVALID_SETTINGS"
            )

        return cls(
            connections=registry.to_dict(),
            api_timeout=api_timeout,
        )

    def registry(self) -> ConnectionRegistry:
        """Build a connection registry from the loaded connection map."""
        return ConnectionRegistry(self.connections)
