"""Shared fixtures: an in-memory theme store behind httpx.MockTransport."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import httpx
import pytest

from themesync.api import ThemeClient
from themesync.config.loader import (
    Config,
    ConfigModel,
    ConnectionSettings,
    NotificationSettings,
    ThemeSettings,
    WatchSettings,
)
from themesync.core import PathResolver, SyncContext
from themesync.notifier import Notifier

_THEME_ASSETS = re.compile(r"^/admin/themes/(\d+)/assets\.json$")


@dataclass
class FakeStore:
    """Minimal theme-asset API: themes plus one asset dict per theme (None = active theme)."""

    themes: list[dict[str, Any]] = field(
        default_factory=lambda: [
            {"id": 1, "name": "Live", "role": "main"},
            {"id": 2, "name": "Staging", "role": ""},
        ]
    )
    assets: dict[int | None, dict[str, dict[str, Any]]] = field(default_factory=dict)
    reject: dict[str, Any] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def theme_assets(self, theme_id: int | None) -> dict[str, dict[str, Any]]:
        return self.assets.setdefault(theme_id, {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/admin/themes.json":
            return httpx.Response(200, json={"themes": self.themes})

        match = _THEME_ASSETS.match(path)
        if match:
            theme_id: int | None = int(match.group(1))
        elif path == "/admin/assets.json":
            theme_id = None
        else:
            return httpx.Response(404, json={"errors": "Not Found"})

        store = self.theme_assets(theme_id)
        key = request.url.params.get("asset[key]")

        if request.method == "GET" and key is None:
            listing = [{"key": name} for name in sorted(store)]
            return httpx.Response(200, json={"assets": listing})
        if request.method == "GET":
            if key not in store:
                return httpx.Response(404, json={"errors": "Not Found"})
            return httpx.Response(200, json={"asset": {"key": key, **store[key]}})
        if request.method == "PUT":
            body = json.loads(request.content)["asset"]
            name = unquote(body.pop("key"))
            if name in self.reject:
                return httpx.Response(422, json={"errors": self.reject[name]})
            store[name] = body
            return httpx.Response(200, json={"asset": {"key": name}})
        if request.method == "DELETE":
            store.pop(key, None)
            return httpx.Response(200, json={"message": f"{key} was successfully deleted"})
        return httpx.Response(405)


class RecordingLog:
    """Stands in for the notify logger and keeps (level, message) pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, msg: str, *args: Any) -> None:
        self.records.append(("info", msg % args))

    def error(self, msg: str, *args: Any) -> None:
        self.records.append(("error", msg % args))

    @property
    def messages(self) -> list[str]:
        return [message for _, message in self.records]

    @property
    def errors(self) -> list[str]:
        return [message for level, message in self.records if level == "error"]


class RecordingDesktop:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send(self, title: str, message: str) -> None:
        self.sent.append((title, message))


def build_config(
    base: Path,
    *,
    theme_id: int | None = None,
    sync_theme_id: int | None = None,
    patterns: list[str] | None = None,
) -> Config:
    model = ConfigModel(
        connection=ConnectionSettings(
            url="shop.example.com", api_key="key", password="secret", timeout=5.0
        ),
        theme=ThemeSettings(base=str(base), theme_id=theme_id, sync_theme_id=sync_theme_id),
        notifications=NotificationSettings(disable_desktop_notifications=True),
        watch=WatchSettings(patterns=patterns) if patterns is not None else WatchSettings(),
    )
    return Config(model=model, raw=model.model_dump())


@dataclass
class Harness:
    context: SyncContext
    store: FakeStore
    log: RecordingLog
    base: Path

    def write(self, relative: str, data: bytes | str) -> Path:
        target = self.base / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            target.write_text(data, encoding="utf-8")
        else:
            target.write_bytes(data)
        return target


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def theme_base(tmp_path: Path) -> Path:
    base = tmp_path / "shop"
    base.mkdir()
    return base.resolve()


@pytest.fixture
def make_harness(store: FakeStore, theme_base: Path):
    def _make(**options: Any) -> Harness:
        dry_run = options.pop("dry_run", False)
        config = build_config(theme_base, **options)
        client = ThemeClient(config.connection, transport=httpx.MockTransport(store.handler))
        log = RecordingLog()
        context = SyncContext(
            config=config,
            client=client,
            resolver=PathResolver.from_setting(config.theme.base),
            notifier=Notifier(settings=config.notifications, desktop=None, log=log),
            dry_run=dry_run,
        )
        return Harness(context=context, store=store, log=log, base=theme_base)

    return _make


@pytest.fixture
def harness(make_harness) -> Harness:
    return make_harness()
