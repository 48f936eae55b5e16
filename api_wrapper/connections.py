"""Named connection registry mapping an API name to its host and version."""

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from api_wrapper.errors import ConfigurationError

logger = logging.getLogger(__name__)

MISSING_CONNECTION_ERROR = "Missing connection config"


class ConnectionConfig(BaseModel):
    """Host and API version for one downstream service."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")

    host: str = Field(min_length=1)
    version: str = Field(min_length=1)


class ConnectionRegistry:
    """
    Lookup table of raw connection entries keyed by API name or audience.

    Entries are stored as given and validated on every lookup, so an
    incomplete entry only fails the request that needs it.
    """

    def __init__(self, connections: Mapping[str, Any] | None = None) -> None:
        self._connections: dict[str, Any] = dict(connections or {})

    @classmethod
    def from_mapping(cls, connections: Mapping[str, Any]) -> "ConnectionRegistry":
        return cls(connections)

    @classmethod
    def from_json(cls, text: str) -> "ConnectionRegistry":
        """Build a registry from a JSON object of ``{name: {host, version}}``."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                "Connection config is not valid JSON.", code="INVALID_SETTINGS"
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Connection config must be a JSON object keyed by API name.",
                code="INVALID_SETTINGS",
            )
        return cls(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "ConnectionRegistry":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"Connection config file could not be read: {path}",
                code="INVALID_SETTINGS",
            ) from exc
        return cls.from_json(text)

    def get(self, key: str) -> ConnectionConfig | None:
        """Return the validated entry for ``key``, or None when it is absent."""
        raw = self._connections.get(key)
        if raw is None:
            return None
        if isinstance(raw, ConnectionConfig):
            return raw
        try:
            return ConnectionConfig.model_validate(raw)
        except ValidationError as exc:
            logger.error("Incomplete connection config", extra={"api": key})
            raise ConfigurationError(f"{MISSING_CONNECTION_ERROR}: {key}") from exc

    def require(self, key: str | None) -> ConnectionConfig:
        if not key:
            raise ConfigurationError(f"{MISSING_CONNECTION_ERROR}: no api set")
        connection = self.get(key)
        if connection is None:
            raise ConfigurationError(f"{MISSING_CONNECTION_ERROR}: {key}")
        return connection

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the raw entries."""
        return dict(self._connections)

    def keys(self) -> list[str]:
        return list(self._connections)

    def __contains__(self, key: object) -> bool:
        return key in self._connections

    def __iter__(self) -> Iterator[str]:
        return iter(self._connections)

    def __len__(self) -> int:
        return len(self._connections)
