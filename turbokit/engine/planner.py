"""Assembly planning: turn one template root into a list of output files.

Planning is two-pass.  The first walk enumerates the whole tree so that
:class:`~turbokit.engine.variants.VariantIndex` knows which output names the
active variant claims in each directory; the second walk (with the include
filter) resolves names and renders content.  Nothing is written until the
complete plan for the root has been built, so a missing variable in the
last file leaves no partial output behind.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from turbokit.engine.variables import render
from turbokit.engine.variants import VariantIndex, resolve_name
from turbokit.engine.walker import DEFAULT_EXCLUDE, matches_pattern, walk
from turbokit.errors import (
    MissingVariableError,
    TemplateConfigError,
    wrap_filesystem_error,
)
from turbokit.utils import make_executable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyOptions:
    """Everything that controls how one template root is planned."""

    variables: Mapping[str, str]
    exclude: frozenset[str] = DEFAULT_EXCLUDE
    include: frozenset[str] | None = None
    variant: str | None = None
    dry_run: bool = False
    executable: frozenset[str] = frozenset()
    """Output file-name patterns that are written with mode 0o755."""


@dataclass(frozen=True)
class PlannedEntry:
    """One output file: where it goes and what it contains."""

    destination: Path
    content: str | bytes
    source: Path
    executable: bool = False

    @property
    def binary(self) -> bool:
        return isinstance(self.content, bytes)


@dataclass
class GenerationPlan:
    """Ordered entries from every template root of a run."""

    entries: list[PlannedEntry] = field(default_factory=list)

    def extend(self, entries: list[PlannedEntry]) -> None:
        self.entries.extend(entries)

    @property
    def paths(self) -> list[Path]:
        return [entry.destination for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


def build_plan(
    template_dir: str | Path,
    dest_dir: str | Path,
    options: CopyOptions,
) -> list[PlannedEntry]:
    """Compute the entries for *template_dir* without touching *dest_dir*.

    Raises:
        MissingVariableError: A text template references an unknown variable.
        TemplateConfigError: Two files resolve to the same destination, a
            file name is malformed, or a text file is not valid UTF-8.
        TemplateNotFoundError: *template_dir* does not exist.
    """
    template_dir = Path(template_dir)
    dest_dir = Path(dest_dir)

    index = VariantIndex.build(
        walk(template_dir, exclude=options.exclude), options.variant
    )

    entries: list[PlannedEntry] = []
    seen: dict[Path, Path] = {}

    for candidate in walk(template_dir, exclude=options.exclude, include=options.include):
        resolution = resolve_name(
            candidate.raw_name,
            options.variant,
            index.overridden(candidate.relative_dir),
        )
        if not resolution.emitted:
            logger.debug(
                "Skipping %s: %s",
                candidate.relative_dir / candidate.raw_name,
                resolution.reason,
            )
            continue

        destination = dest_dir / candidate.relative_dir / resolution.name
        if destination in seen:
            raise TemplateConfigError(
                f"Template files {seen[destination]} and {candidate.source} "
                f"both resolve to {destination}"
            )
        seen[destination] = candidate.source

        try:
            raw = candidate.source.read_bytes()
        except OSError as exc:
            raise wrap_filesystem_error(exc, str(candidate.source), "read") from exc

        content: str | bytes
        if candidate.binary:
            content = raw
        else:
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise TemplateConfigError(
                    f"Template file {candidate.source} is not valid UTF-8 text "
                    f"(byte {exc.start}). Fix its encoding or give it a binary extension."
                ) from exc
            try:
                content = render(text, options.variables)
            except MissingVariableError as exc:
                raise exc.with_source(str(candidate.source)) from None

        entries.append(
            PlannedEntry(
                destination=destination,
                content=content,
                source=candidate.source,
                executable=matches_pattern(resolution.name, options.executable),
            )
        )

    return entries


def write_plan(entries: list[PlannedEntry]) -> list[Path]:
    """Write every entry to disk, creating parent directories as needed."""
    written: list[Path] = []
    for entry in entries:
        path = entry.destination
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(entry.content, bytes):
                path.write_bytes(entry.content)
            else:
                path.write_bytes(entry.content.encode("utf-8"))
            if entry.executable:
                make_executable(path)
        except OSError as exc:
            raise wrap_filesystem_error(exc, str(path), "write") from exc
        written.append(path)
    return written


def copy_template(
    template_dir: str | Path,
    dest_dir: str | Path,
    options: CopyOptions,
) -> list[Path]:
    """Plan *template_dir* and, unless ``options.dry_run``, write it to *dest_dir*.

    Returns:
        Destination paths in plan order.  Dry and real runs return the same
        list for the same inputs.
    """
    entries = build_plan(template_dir, dest_dir, options)
    paths = [entry.destination for entry in entries]

    if options.dry_run:
        return paths

    dest_dir = Path(dest_dir)
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise wrap_filesystem_error(exc, str(dest_dir), "create directory") from exc
    write_plan(entries)
    logger.debug("Wrote %d file(s) to %s", len(entries), dest_dir)
    return paths
