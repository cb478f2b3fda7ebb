"""Whole-theme operations built from the single-asset ones, run strictly in series."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import TypeVar

from themesync.api.schemas import Theme
from themesync.core import operations
from themesync.core.context import SyncContext
from themesync.core.operations import OperationResult
from themesync.errors import InvalidRequestError

DEPLOY_PATTERNS: tuple[str, ...] = (
    "assets/*.*",
    "config/*.*",
    "layout/*.*",
    "locales/*.*",
    "snippets/*.*",
    "templates/*.*",
    "templates/customers/*.*",
)
SETTINGS_DATA_FILENAME = "settings_data.json"

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


async def run_series(
    items: Iterable[ItemT],
    operation: Callable[[ItemT], Awaitable[ResultT]],
) -> list[ResultT]:
    """Await ``operation`` for each item in order.

    The first exception stops the series and propagates; items already
    processed stay processed and later items are never attempted.
    """

    results: list[ResultT] = []
    for item in items:
        results.append(await operation(item))
    return results


def expand_deploy_paths(base: Path, skip_json: bool = False) -> list[str]:
    """List deployable files under ``base`` as forward-slash paths relative to it.

    ``skip_json`` drops the entry equal to ``settings_data.json``. Entries are
    relative paths such as ``config/settings_data.json``, so only a bare
    top-level match is ever removed.
    """

    seen: set[str] = set()
    paths: list[str] = []
    for pattern in DEPLOY_PATTERNS:
        for match in sorted(base.glob(pattern)):
            if not match.is_file():
                continue
            relative = match.relative_to(base).as_posix()
            if relative not in seen:
                seen.add(relative)
                paths.append(relative)

    return drop_settings_data(paths) if skip_json else paths


def drop_settings_data(paths: list[str]) -> list[str]:
    """Return ``paths`` without the entry that equals ``settings_data.json``, if any."""

    return [path for path in paths if path != SETTINGS_DATA_FILENAME]


async def deploy(context: SyncContext, skip_json: bool = False) -> list[OperationResult]:
    """Upload every deployable file under base, one at a time, stopping at the first failure."""

    base = context.resolver.base
    paths = expand_deploy_paths(base, skip_json=skip_json)
    context.logger.info("Deploying %d file(s) from %s", len(paths), base)

    async def _upload(relative: str) -> OperationResult:
        return await operations.upload(context, base / relative)

    try:
        results = await run_series(paths, _upload)
    except InvalidRequestError as exc:
        context.notifier.error(f"Error deploying theme {json.dumps(exc.detail, default=str)}")
        raise
    context.notifier.notify("Theme deploy complete.")
    return results


async def download_theme(context: SyncContext) -> list[OperationResult]:
    """Download every asset of the configured theme."""

    return await _fetch_theme(context, context.theme_id, operations.download)


async def sync_theme(context: SyncContext) -> list[OperationResult]:
    """Download every asset of the configured sync theme."""

    return await _fetch_theme(context, context.sync_theme_id, operations.sync)


async def themes(context: SyncContext) -> list[Theme]:
    """Print one ``<id> - <name>[ (<role>)]`` line per remote theme."""

    listed = await context.client.list_themes()
    for theme in listed:
        context.notifier.write_line(theme.describe())
    return listed


async def _fetch_theme(
    context: SyncContext,
    theme_id: int | None,
    fetch: Callable[[SyncContext, Path], Awaitable[OperationResult]],
) -> list[OperationResult]:
    base = context.resolver.base
    try:
        listing = await context.assets(theme_id).list()
    except InvalidRequestError as exc:
        context.notifier.error(f"Error downloading theme {json.dumps(exc.detail, default=str)}")
        raise
    context.logger.info("Theme %s lists %d asset(s)", theme_id or "(active)", len(listing))

    async def _one(key: str) -> OperationResult:
        return await fetch(context, base / key)

    results = await run_series((entry.key for entry in listing), _one)
    context.notifier.notify("Theme download complete.")
    return results
