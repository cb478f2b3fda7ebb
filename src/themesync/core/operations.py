"""Single-asset operations: upload, download, sync, remove."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pprint import pformat
from typing import Any, Literal

from themesync.api.schemas import Asset, AssetUpload
from themesync.core.context import SyncContext
from themesync.core.paths import PathLike, is_binary_file
from themesync.errors import InvalidRequestError

Status = Literal["uploaded", "downloaded", "printed", "removed", "skipped"]


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a single-asset operation that did not fail.

    ``skipped`` means the path was rejected by validation and nothing was sent.
    """

    key: str | None
    status: Status

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"


def _detail(error: InvalidRequestError) -> str:
    return json.dumps(error.detail, default=str)


async def upload(context: SyncContext, path: PathLike) -> OperationResult:
    """Push the local file at ``path`` to the configured theme (or the active one)."""

    if not context.validate(path):
        return OperationResult(key=None, status="skipped")

    resolver = context.resolver
    key = resolver.to_asset_key(path)
    absolute = resolver.absolute(path)
    binary = is_binary_file(absolute)
    payload = AssetUpload.from_bytes(key, absolute.read_bytes(), binary=binary)

    context.notifier.notify(f'Uploading "{key}"')
    context.logger.debug("Uploading %s as %s", key, "attachment" if binary else "value")
    try:
        await context.assets(context.theme_id).update(payload)
    except InvalidRequestError as exc:
        context.notifier.error(f"Error uploading file {_detail(exc)}")
        raise
    context.notifier.notify(f'File "{key}" uploaded.')
    return OperationResult(key=key, status="uploaded")


async def download(context: SyncContext, path: PathLike) -> OperationResult:
    """Fetch ``path`` from the configured theme and write it under the base directory.

    The path is not checked against base or the whitelist; any key is attempted.
    """

    return await _fetch(context, path, context.theme_id)


async def sync(context: SyncContext, path: PathLike) -> OperationResult:
    """Like :func:`download`, but pulls from the configured sync theme."""

    return await _fetch(context, path, context.sync_theme_id)


async def remove(context: SyncContext, path: PathLike) -> OperationResult:
    """Delete the asset matching ``path`` from the configured theme (or the active one)."""

    if not context.validate(path):
        return OperationResult(key=None, status="skipped")

    key = context.resolver.to_asset_key(path)
    context.notifier.notify(f'File "{key}" being removed.')
    await context.assets(context.theme_id).destroy(key)
    context.notifier.notify(f'File "{key}" removed.')
    return OperationResult(key=key, status="removed")


async def _fetch(context: SyncContext, path: PathLike, theme_id: int | None) -> OperationResult:
    key = context.resolver.to_asset_key(path)
    try:
        asset = await context.assets(theme_id).retrieve(key)
    except InvalidRequestError as exc:
        context.notifier.error(f"Error downloading asset file {_detail(exc)}")
        raise
    return save_asset(context, key, asset)


def save_asset(context: SyncContext, key: str, asset: Asset) -> OperationResult:
    """Persist a retrieved asset to ``base/key``, or print it in dry-run mode."""

    context.notifier.notify(f'Downloading "{key}".')
    contents = asset.contents()

    if context.dry_run:
        context.notifier.write_line(pformat(_printable(asset)))
        return OperationResult(key=key, status="printed")

    destination = context.resolver.local_path(key)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(contents)
    context.notifier.notify(f'File "{key}" saved to disk.')
    return OperationResult(key=key, status="downloaded")


def _printable(asset: Asset) -> dict[str, Any]:
    return {"asset": asset.model_dump(exclude_none=True)}
