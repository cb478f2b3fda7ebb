"""Per-invocation state shared by every operation."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from themesync.api import AssetResource, ThemeClient
from themesync.config import Config
from themesync.core.paths import PathLike, PathResolver
from themesync.notifier import DesktopChannel, Notifier


@dataclass(frozen=True, slots=True)
class SyncContext:
    """Everything an operation needs, built once and never mutated.

    ``dry_run`` makes downloads print the parsed asset instead of writing it.
    """

    config: Config
    client: ThemeClient
    resolver: PathResolver
    notifier: Notifier
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("themesync"))
    dry_run: bool = False

    @property
    def theme_id(self) -> int | None:
        return self.config.theme.theme_id

    @property
    def sync_theme_id(self) -> int | None:
        return self.config.theme.sync_theme_id

    def assets(self, theme_id: int | None) -> AssetResource:
        return self.client.assets(theme_id)

    def validate(self, path: PathLike) -> bool:
        """Check ``path`` against base and whitelist, telling the user when it is rejected."""

        problem = self.resolver.validation_error(path)
        if problem is None:
            return True
        self.notifier.notify(problem)
        return False


@asynccontextmanager
async def open_context(
    config: Config,
    *,
    logger: logging.Logger | None = None,
    dry_run: bool = False,
    desktop: DesktopChannel | None = None,
    client: ThemeClient | None = None,
) -> AsyncIterator[SyncContext]:
    """Build a :class:`SyncContext` and close its HTTP client on exit."""

    owned = client is None
    api = client if client is not None else ThemeClient(config.connection)
    notifier = Notifier(settings=config.notifications)
    if desktop is not None:
        notifier = Notifier(settings=config.notifications, desktop=desktop)
    try:
        yield SyncContext(
            config=config,
            client=api,
            resolver=PathResolver.from_setting(config.theme.base),
            notifier=notifier,
            logger=logger or logging.getLogger("themesync"),
            dry_run=dry_run,
        )
    finally:
        if owned:
            await api.aclose()
