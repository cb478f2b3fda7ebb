"""Configuration loading for Themesync."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
LOCAL_CONFIG_PATH = Path("config/local.yaml")

# Environment variables layered over the YAML documents, as (section, key).
ENVIRONMENT_OVERRIDES: dict[str, tuple[str, str]] = {
    "THEMESYNC_URL": ("connection", "url"),
    "THEMESYNC_API_KEY": ("connection", "api_key"),
    "THEMESYNC_PASSWORD": ("connection", "password"),
    "THEMESYNC_THEME_ID": ("theme", "theme_id"),
    "THEMESYNC_SYNC_THEME_ID": ("theme", "sync_theme_id"),
}

DEFAULT_WATCH_PATTERNS = [
    "assets/*",
    "config/*",
    "layout/*",
    "locales/*",
    "snippets/*",
    "templates/*",
    "templates/customers/*",
]


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Path | None = None
    level: str = Field(default="info")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("Logging level must be a string.")
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warn", "warning", "error", "critical"}:
            raise ValueError(f"Unsupported logging level: {value!r}")
        return normalized


class ConnectionSettings(BaseModel):
    """Where the storefront lives and how to authenticate against it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = ""
    scheme: str = Field(default="https")
    port: int = Field(default=443, ge=1, le=65535)
    api_key: str = ""
    password: str = Field(default="", repr=False)
    timeout: float = Field(default=30.0, gt=0.0)

    @field_validator("url", mode="before")
    @classmethod
    def _strip_url(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise TypeError("Connection url must be a string.")
        host = value.strip()
        # Accept pasted URLs; only the host is kept.
        if "://" in host:
            host = host.split("://", 1)[1]
        return host.rstrip("/")

    @field_validator("scheme", mode="before")
    @classmethod
    def _normalize_scheme(cls, value: Any) -> str:
        if not isinstance(value, str) or value.strip().lower() not in {"http", "https"}:
            raise ValueError("Connection scheme must be 'http' or 'https'.")
        return value.strip().lower()


class ThemeSettings(BaseModel):
    """Local base directory and the remote themes it maps to."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base: str = ""
    theme_id: int | None = None
    sync_theme_id: int | None = None

    @field_validator("base", mode="before")
    @classmethod
    def _normalize_base(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("theme_id", "sync_theme_id", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class NotificationSettings(BaseModel):
    """User-facing notice channels."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    disable_desktop_notifications: bool = False
    disable_log: bool = False


class WatchSettings(BaseModel):
    """Glob patterns, relative to the base directory, that the watcher reacts to."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_WATCH_PATTERNS))

    @field_validator("patterns", mode="before")
    @classmethod
    def _normalize_patterns(cls, value: Any) -> list[str]:
        if value is None:
            return list(DEFAULT_WATCH_PATTERNS)
        if not isinstance(value, list):
            raise TypeError("Watch patterns must be a list of strings.")
        cleaned: list[str] = []
        for item in value:
            if not isinstance(item, str):
                raise TypeError("Watch patterns must be strings.")
            pattern = item.strip().replace("\\", "/")
            if pattern:
                cleaned.append(pattern)
        return cleaned


class ConfigModel(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: int = 1
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    connection: ConnectionSettings = Field(default_factory=ConnectionSettings)
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)


@dataclass(frozen=True, slots=True)
class Config:
    """Validated configuration with convenience helpers."""

    model: ConfigModel
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)
    loaded_from: tuple[str, ...] = field(default_factory=tuple, repr=False)

    @property
    def logging(self) -> LoggingSettings:
        return self.model.logging

    @property
    def connection(self) -> ConnectionSettings:
        return self.model.connection

    @property
    def theme(self) -> ThemeSettings:
        return self.model.theme

    @property
    def notifications(self) -> NotificationSettings:
        return self.model.notifications

    @property
    def watch(self) -> WatchSettings:
        return self.model.watch

    def model_dump(self) -> Mapping[str, Any]:
        """Expose the parsed configuration as a mapping, with secrets masked."""

        data = self.model.model_dump(mode="json")
        if data["connection"].get("password"):
            data["connection"]["password"] = "********"
        return data


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from defaults/local overrides, or from an explicit config document.

    Environment overrides (``THEMESYNC_*``) are applied last in both cases.
    """

    merged: dict[str, Any] = {}
    loaded_from: list[str] = []

    if path is not None:
        override_path = _resolve_path(path)
        if not override_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        merged = _merge_dicts(merged, _read_yaml(override_path))
        loaded_from.append(str(override_path))
    else:
        default_candidate = _resolve_path(DEFAULT_CONFIG_PATH)
        packaged_default = _resolve_packaged_path(DEFAULT_CONFIG_PATH)
        if default_candidate.exists():
            merged = _merge_dicts(merged, _read_yaml(default_candidate))
            loaded_from.append(str(default_candidate))
        elif packaged_default and packaged_default.exists():
            merged = _merge_dicts(merged, _read_yaml(packaged_default))
            loaded_from.append(str(packaged_default))
        else:
            packaged_payload = _read_packaged_yaml("themesync.config", "default.yaml")
            if packaged_payload is not None:
                merged = _merge_dicts(merged, packaged_payload)
                loaded_from.append("themesync.config:default.yaml")

        local_candidate = _resolve_path(LOCAL_CONFIG_PATH)
        if local_candidate.exists():
            merged = _merge_dicts(merged, _read_yaml(local_candidate))
            loaded_from.append(str(local_candidate))

    if not merged:
        raise FileNotFoundError("No configuration data could be loaded.")

    overrides = _environment_overrides(os.environ if environ is None else environ)
    if overrides:
        merged = _merge_dicts(merged, overrides)
        loaded_from.append("environment")

    try:
        model = ConfigModel.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    return Config(model=model, raw=merged, loaded_from=tuple(loaded_from))


def _environment_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``THEMESYNC_*`` variables into a config-shaped mapping."""

    overrides: dict[str, dict[str, Any]] = {}
    for variable, (section, key) in ENVIRONMENT_OVERRIDES.items():
        value = environ.get(variable)
        if value is None or not value.strip():
            continue
        overrides.setdefault(section, {})[key] = value.strip()
    return overrides


def _resolve_path(path: Path) -> Path:
    """Resolve configuration paths relative to the current working directory."""

    return path if path.is_absolute() else Path.cwd() / path


def _resolve_packaged_path(path: Path) -> Path | None:
    """Resolve paths embedded in packaged binaries (e.g., PyInstaller)."""

    base = getattr(sys, "_MEIPASS", None)
    if not base:
        return None
    return Path(base) / path


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file into a dictionary."""

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must define a mapping at the top level.")
    return data


def _read_packaged_yaml(package: str, name: str) -> dict[str, Any] | None:
    """Read YAML embedded in a Python package via importlib.resources."""

    try:
        content = resources.files(package).joinpath(name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Packaged configuration {package}:{name} must define a mapping at the top level."
        )
    return data


def _merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two dictionaries, with override values taking precedence."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result
