"""User-facing notices: log channel plus optional desktop notifications."""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Protocol, TextIO
from urllib.parse import unquote

from themesync.config import NotificationSettings

NOTIFY_LOGGER_NAME = "themesync.notify"
NOTIFICATION_TITLE = "themesync"
LOG_PREFIX = "[themesync] - "

logger = logging.getLogger(__name__)


class DesktopChannel(Protocol):
    """Anything able to pop a desktop notification."""

    def send(self, title: str, message: str) -> None:
        """Display ``message`` under ``title``."""


@dataclass(slots=True)
class CommandDesktopChannel:
    """Desktop notifications through ``notify-send`` (Linux) or ``osascript`` (macOS).

    Does nothing on systems that provide neither command.
    """

    timeout: float = 5.0

    def _command(self, title: str, message: str) -> list[str] | None:
        system = platform.system()
        if system == "Darwin" and shutil.which("osascript"):
            script = f"display notification {_applescript_quote(message)} with title {_applescript_quote(title)}"
            return ["osascript", "-e", script]
        if system == "Linux" and shutil.which("notify-send"):
            return ["notify-send", title, message]
        return None

    def send(self, title: str, message: str) -> None:
        command = self._command(title, message)
        if command is None:
            return
        subprocess.run(command, check=True, capture_output=True, timeout=self.timeout)


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(slots=True)
class Notifier:
    """Reports successes and failures to the user. Never raises."""

    settings: NotificationSettings = field(default_factory=NotificationSettings)
    desktop: DesktopChannel | None = field(default_factory=CommandDesktopChannel)
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(NOTIFY_LOGGER_NAME))
    stream: TextIO | None = None

    def notify(self, message: str, is_error: bool = False) -> None:
        """Send ``message`` to the enabled channels, URI-decoded."""

        text = unquote(str(message))

        if self.desktop is not None and not self.settings.disable_desktop_notifications:
            try:
                self.desktop.send(NOTIFICATION_TITLE, text)
            except Exception as exc:  # noqa: BLE001 - notification failures never propagate
                logger.debug("Desktop notification failed: %s", exc)

        if not self.settings.disable_log:
            if is_error:
                self.log.error("%s%s", LOG_PREFIX, text)
            else:
                self.log.info("%s%s", LOG_PREFIX, text)

    def error(self, message: str) -> None:
        self.notify(message, is_error=True)

    def write_line(self, text: str) -> None:
        """Write report output (theme listings, dry-run dumps) to stdout."""

        stream = self.stream or sys.stdout
        stream.write(f"{text}\n")
        stream.flush()
