"""Core sync components for Themesync."""

from .batch import deploy, download_theme, expand_deploy_paths, run_series, sync_theme, themes
from .context import SyncContext, open_context
from .operations import OperationResult, download, remove, sync, upload
from .paths import PathResolver
from .watch import WatchDispatcher, watch_theme

__all__ = [
    "OperationResult",
    "PathResolver",
    "SyncContext",
    "WatchDispatcher",
    "deploy",
    "download",
    "download_theme",
    "expand_deploy_paths",
    "open_context",
    "remove",
    "run_series",
    "sync",
    "sync_theme",
    "themes",
    "upload",
    "watch_theme",
]
