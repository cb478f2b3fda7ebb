"""Command line entry points for Themesync."""

from .app import app

__all__ = ["app"]
