"""Mapping between local theme files and remote asset keys."""

from __future__ import annotations

import fnmatch
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote, unquote

WHITELIST_PATTERN = re.compile(r"^(assets|config|layout|snippets|templates|locales)/", re.IGNORECASE)

# Characters JavaScript's encodeURI leaves untouched, beyond quote()'s own
# alphanumerics and "_.-~".
_URI_SAFE = ";,/?:@&=+$!*'()#"

_SNIFF_BYTES = 512
_CONTROL_BYTES = bytes(range(0, 7)) + bytes(range(14, 32)) + b"\x7f"
_CONTROL_RATIO = 0.1

PathLike = str | os.PathLike[str]


def encode_uri(text: str) -> str:
    """Percent-encode ``text`` the way JavaScript's ``encodeURI`` does."""

    return quote(text, safe=_URI_SAFE)


def resolve_base(base: str | None) -> Path:
    """Return the configured base directory, or the working directory when unset or empty."""

    if base:
        return Path(base).expanduser().resolve()
    return Path.cwd().resolve()


def is_binary_file(path: PathLike) -> bool:
    """Sniff the first block of ``path`` for binary content."""

    with open(path, "rb") as handle:
        block = handle.read(_SNIFF_BYTES)
    if not block:
        return False
    if b"\x00" in block:
        return True
    try:
        block.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut at the block edge is still text.
        if exc.reason != "unexpected end of data" or exc.start < len(block) - 3:
            return True
    control = sum(1 for byte in block if byte in _CONTROL_BYTES)
    return control / len(block) > _CONTROL_RATIO


@dataclass(frozen=True, slots=True)
class PathResolver:
    """Validates local paths against the base directory and turns them into asset keys.

    ``base`` is resolved once at construction and never changes afterwards.
    """

    base: Path = field(default_factory=lambda: resolve_base(None))

    @classmethod
    def from_setting(cls, base: str | None) -> PathResolver:
        return cls(base=resolve_base(base))

    def absolute(self, path: PathLike) -> Path:
        """Absolute form of ``path``; relative paths are taken from the working directory."""

        return Path(os.path.abspath(os.fspath(path)))

    def is_in_base(self, path: PathLike) -> bool:
        try:
            candidate = self.absolute(path).resolve()
            candidate.relative_to(self.base)
        except (OSError, ValueError, RuntimeError, TypeError):
            return False
        return True

    def to_relative(self, path: PathLike) -> str:
        relative = os.path.relpath(self.absolute(path).resolve(), self.base)
        return relative.replace("\\", "/")

    def is_whitelisted(self, path: PathLike) -> bool:
        return WHITELIST_PATTERN.match(self.to_relative(path)) is not None

    def validation_error(self, path: PathLike) -> str | None:
        """Return the user notice explaining why ``path`` is unusable, or None when it is fine."""

        if not self.is_in_base(path):
            return f'File "{os.fspath(path)}" not in base path'
        if not self.is_whitelisted(path):
            return f'File "{self.to_relative(path)}" not allowed by whitelist'
        return None

    def to_asset_key(self, path: PathLike) -> str:
        return encode_uri(self.to_relative(path))

    def local_path(self, key: str) -> Path:
        """Where the asset identified by ``key`` lives on disk."""

        return self.base / unquote(key)

    def is_watched(self, path: PathLike, patterns: Iterable[str]) -> bool:
        """True when ``path`` matches one of the glob ``patterns``.

        Patterns are tried against the path relative to base and against the
        path as given, both with forward slashes.
        """

        raw = os.fspath(path).replace("\\", "/")
        candidates = {raw}
        if self.is_in_base(path):
            candidates.add(self.to_relative(path))
        return any(
            fnmatch.fnmatchcase(candidate, pattern)
            for pattern in patterns
            for candidate in candidates
        )
