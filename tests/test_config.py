"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from themesync.config import load_config
from themesync.config.loader import DEFAULT_WATCH_PATTERNS


def _write_yaml(path: Path, payload: dict) -> None:
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")


def test_load_config_merges_default_and_local(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_payload = {
        "version": 1,
        "logging": {"level": "info"},
        "connection": {"url": "shop.example.com", "port": 443, "timeout": 20},
        "theme": {"base": "theme", "theme_id": 100},
    }
    local_payload = {
        "logging": {"level": "warn"},
        "connection": {"api_key": "local-key", "password": "local-pass"},
        "theme": {"sync_theme_id": 200},
    }

    _write_yaml(config_dir / "default.yaml", default_payload)
    _write_yaml(config_dir / "local.yaml", local_payload)

    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config.logging.level == "warn"
    assert config.connection.url == "shop.example.com"
    assert config.connection.timeout == 20
    assert config.connection.api_key == "local-key"
    assert config.theme.base == "theme"
    assert config.theme.theme_id == 100
    assert config.theme.sync_theme_id == 200
    assert config.watch.patterns == DEFAULT_WATCH_PATTERNS
    assert len(config.loaded_from) == 2


def test_load_config_with_explicit_override(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    _write_yaml(config_dir / "default.yaml", {"logging": {"level": "warn"}})
    _write_yaml(config_dir / "local.yaml", {"logging": {"level": "error"}})
    override_path = tmp_path / "extra.yaml"
    _write_yaml(override_path, {"theme": {"theme_id": 7}})

    monkeypatch.chdir(tmp_path)

    config = load_config(override_path, environ={})

    assert config.theme.theme_id == 7
    assert config.logging.level == "info"
    assert config.loaded_from == (str(override_path),)


def test_load_config_falls_back_to_packaged_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config.loaded_from == ("themesync.config:default.yaml",)
    assert config.theme.theme_id is None
    assert config.connection.port == 443
    assert config.notifications.disable_desktop_notifications is True


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    environ = {
        "THEMESYNC_URL": "https://other.example.com",
        "THEMESYNC_API_KEY": "env-key",
        "THEMESYNC_PASSWORD": "env-pass",
        "THEMESYNC_THEME_ID": "12",
        "THEMESYNC_SYNC_THEME_ID": " ",
    }

    config = load_config(environ=environ)

    assert config.connection.url == "other.example.com"
    assert config.connection.api_key == "env-key"
    assert config.theme.theme_id == 12
    assert config.theme.sync_theme_id is None
    assert config.loaded_from[-1] == "environment"


def test_model_dump_masks_password(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={"THEMESYNC_PASSWORD": "hunter2"})

    assert config.model_dump()["connection"]["password"] == "********"
    assert config.connection.password == "hunter2"


def test_missing_explicit_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml", environ={})


@pytest.mark.parametrize(
    "payload",
    [
        {"connection": {"scheme": "ftp"}},
        {"connection": {"port": 0}},
        {"theme": {"theme_id": "live"}},
        {"logging": {"level": "loud"}},
        {"unexpected": True},
    ],
)
def test_invalid_documents_are_rejected(tmp_path, payload):
    path = tmp_path / "bad.yaml"
    _write_yaml(path, payload)

    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path, environ={})


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_config(path, environ={})
