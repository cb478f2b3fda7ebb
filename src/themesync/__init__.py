"""Themesync: keep a local theme directory in step with a storefront's theme assets."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path

DISTRIBUTION = "themesync"


def _version_from_checkout() -> str | None:
    """Read `[project].version` when running from a source tree."""

    here = Path(__file__).resolve().parent
    for candidate in here.parents:
        pyproject = candidate / "pyproject.toml"
        if not pyproject.is_file():
            continue
        try:
            with pyproject.open("rb") as handle:
                project = tomllib.load(handle).get("project") or {}
        except (OSError, tomllib.TOMLDecodeError):  # pragma: no cover - filesystem errors
            return None
        if project.get("name") != DISTRIBUTION:
            return None
        version = project.get("version")
        return version.strip() if isinstance(version, str) and version.strip() else None
    return None


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the Themesync version, preferring the checkout's pyproject over installed metadata."""

    version = _version_from_checkout()
    if version is not None:
        return version
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError as exc:  # pragma: no cover - occurs in dev
        raise RuntimeError("Unable to determine Themesync version.") from exc


__all__ = ["get_version"]
