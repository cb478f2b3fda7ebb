"""Map filesystem change events onto upload/remove calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from watchfiles import Change, awatch

from themesync.core import operations
from themesync.core.context import SyncContext
from themesync.core.operations import OperationResult
from themesync.core.paths import PathLike
from themesync.errors import ThemeSyncError

Action = Literal["added", "changed", "renamed", "deleted"]

UPLOAD_ACTIONS = frozenset({"added", "changed", "renamed"})

_CHANGE_ACTIONS: dict[Change, Action] = {
    Change.added: "added",
    Change.modified: "changed",
    Change.deleted: "deleted",
}

Operation = Callable[[SyncContext, PathLike], Awaitable[OperationResult]]


@dataclass(slots=True)
class WatchDispatcher:
    """Receives change notifications and syncs the affected file.

    There is nobody to report to, so failures are notified and then dropped.
    """

    context: SyncContext
    upload: Operation = operations.upload
    remove: Operation = operations.remove

    @property
    def patterns(self) -> list[str]:
        return self.context.config.watch.patterns

    async def on_event(self, action: str, path: PathLike) -> OperationResult | None:
        if not self.context.resolver.is_watched(path, self.patterns):
            return None

        if action == "deleted":
            return await self._guarded(self.remove, path)
        if Path(path).is_file():
            if action in UPLOAD_ACTIONS:
                return await self._guarded(self.upload, path)
            self.context.logger.debug("Ignoring %s event for %s", action, path)
            return None

        self.context.notifier.notify(f"Skipping non-file {path}")
        return None

    async def _guarded(self, operation: Operation, path: PathLike) -> OperationResult | None:
        try:
            return await operation(self.context, path)
        except (ThemeSyncError, OSError) as exc:
            self.context.notifier.error(str(exc))
            self.context.logger.debug("Watch operation failed for %s", path, exc_info=True)
            return None


async def watch_theme(
    dispatcher: WatchDispatcher,
    *,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Feed changes under the base directory to ``dispatcher``, one at a time."""

    base = dispatcher.context.resolver.base
    dispatcher.context.notifier.notify(f"Watching {base} for changes.")
    async for changes in awatch(base, stop_event=stop_event):
        for change, raw_path in sorted(changes, key=lambda item: item[1]):
            action = _CHANGE_ACTIONS.get(change)
            if action is None:
                continue
            await dispatcher.on_event(action, raw_path)
