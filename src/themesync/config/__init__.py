"""Configuration utilities for Themesync."""

from .loader import (
    Config,
    ConnectionSettings,
    NotificationSettings,
    ThemeSettings,
    WatchSettings,
    load_config,
)

__all__ = [
    "Config",
    "ConnectionSettings",
    "NotificationSettings",
    "ThemeSettings",
    "WatchSettings",
    "load_config",
]
