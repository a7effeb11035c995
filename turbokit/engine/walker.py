"""Template tree enumeration with exclude/include filtering."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from turbokit.engine.variants import ParsedName, parse_name
from turbokit.errors import (
    TemplateConfigError,
    TemplateNotFoundError,
    wrap_filesystem_error,
)

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE: frozenset[str] = frozenset({"node_modules", ".git"})

# Files with these extensions are copied byte-for-byte, never rendered.
BINARY_EXTENSIONS: frozenset[str] = frozenset({
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".ico",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
})


@dataclass(frozen=True)
class CandidateFile:
    """A file found while walking a template root."""

    source: Path
    relative_dir: Path
    parsed: ParsedName
    binary: bool

    @property
    def raw_name(self) -> str:
        return self.parsed.raw


@lru_cache(maxsize=256)
def _pattern_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def matches_pattern(name: str, patterns: Iterable[str]) -> bool:
    """Return ``True`` if *name* matches any pattern.

    A pattern without ``*`` must equal the name.  ``*`` matches any run of
    characters, including none, and the whole name must match.
    """
    for pattern in patterns:
        if "*" in pattern:
            if _pattern_regex(pattern).fullmatch(name):
                return True
        elif name == pattern:
            return True
    return False


def is_binary_name(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in BINARY_EXTENSIONS


def walk(
    root: str | Path,
    exclude: Iterable[str] = DEFAULT_EXCLUDE,
    include: Iterable[str] | None = None,
) -> Iterator[CandidateFile]:
    """Lazily yield every candidate file under *root*, depth-first.

    Entries are visited in name order and a directory's contents are yielded
    before its following siblings.  Excluded names are never entered (for
    directories) or yielded (for files).  *include*, when given, only
    filters files.

    Raises:
        TemplateNotFoundError: If *root* is not a directory.
        TemplateConfigError: If a file name carries more than one variant
            marker, or a directory entry is a symlink to a directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise TemplateNotFoundError(str(root))

    exclude = frozenset(exclude)
    include = frozenset(include) if include is not None else None
    yield from _walk_dir(root, Path(), exclude, include)


def _walk_dir(
    directory: Path,
    relative: Path,
    exclude: frozenset[str],
    include: frozenset[str] | None,
) -> Iterator[CandidateFile]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise wrap_filesystem_error(exc, str(directory), "read directory") from exc

    for entry in entries:
        if matches_pattern(entry.name, exclude):
            logger.debug("Excluded %s", relative / entry.name)
            continue

        if entry.is_dir(follow_symlinks=False):
            yield from _walk_dir(
                Path(entry.path), relative / entry.name, exclude, include
            )
            continue

        if entry.is_symlink() and entry.is_dir():
            raise TemplateConfigError(
                f"Symlinked directory {entry.path} in a template root is not "
                "supported. Replace it with a real directory."
            )

        if include is not None and not matches_pattern(entry.name, include):
            continue

        parsed = parse_name(entry.name)
        yield CandidateFile(
            source=Path(entry.path),
            relative_dir=relative,
            parsed=parsed,
            binary=is_binary_name(entry.name),
        )
