import json
from pathlib import Path

import pytest

from api_wrapper.connections import ConnectionConfig, ConnectionRegistry
from api_wrapper.errors import ConfigurationError
from api_wrapper.settings import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("api_wrapper.settings.load_dotenv", lambda: None)
    for name in ("API_CONNECTIONS", "API_CONNECTIONS_FILE", "API_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    settings = Settings.load()

    assert settings.api_timeout == 10.0
    assert len(settings.registry()) == 0


def test_inline_connections(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "API_CONNECTIONS", json.dumps({"vehicles": {"host": "https://vehicles", "version": "v2"}})
    )
    monkeypatch.setenv("API_TIMEOUT", "2.5")

    settings = Settings.load()

    assert settings.api_timeout == 2.5
    assert settings.registry().require("vehicles") == ConnectionConfig(
        host="https://vehicles", version="v2"
    )


def test_connections_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "connections.json"
    path.write_text(json.dumps({"dealers": {"host": "https://dealers", "version": "v1"}}))
    monkeypatch.setenv("API_CONNECTIONS_FILE", str(path))

    registry = Settings.load().registry()

    assert "dealers" in registry
    assert registry.require("dealers").host == "https://dealers"


@pytest.mark.parametrize("value", ["abc", "0", "-1"])
def test_invalid_timeout_rejected(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("API_TIMEOUT", value)

    with pytest.raises(ConfigurationError) as exc:
        Settings.load()
    assert exc.value.code == "INVALID_SETTINGS"


@pytest.mark.parametrize("value", ["not json", "[1, 2]"])
def test_malformed_connections_rejected(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("API_CONNECTIONS", value)

    with pytest.raises(ConfigurationError):
        Settings.load()


def test_missing_connections_file_rejected(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("API_CONNECTIONS_FILE", str(tmp_path / "absent.json"))

    with pytest.raises(ConfigurationError):
        Settings.load()


def test_registry_get_distinguishes_absent_from_incomplete() -> None:
    registry = ConnectionRegistry({"partial": {"host": "h"}})

    assert registry.get("absent") is None
    with pytest.raises(ConfigurationError):
        registry.get("partial")
    with pytest.raises(ConfigurationError):
        registry.require("absent")


def test_registry_strips_whitespace() -> None:
    registry = ConnectionRegistry({"api": {"host": " https://h ", "version": "v1 "}})

    assert registry.require("api") == ConnectionConfig(host="https://h", version="v1")


def test_registry_from_mapping_lists_keys_in_order() -> None:
    registry = ConnectionRegistry.from_mapping(
        {
            "vehicles": {"host": "https://vehicles", "version": "v1"},
            "dealers": {"host": "https://dealers", "version": "v2"},
        }
    )

    assert registry.keys() == ["vehicles", "dealers"]
    assert list(registry) == ["vehicles", "dealers"]
    assert registry.to_dict()["dealers"] == {"host": "https://dealers", "version": "v2"}
