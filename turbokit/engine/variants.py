"""Variant file resolution.

A template file name may carry a variant marker segment, for example
``App.with-api.tsx.template``.  When the ``api`` variant is active that file
is emitted as ``App.tsx`` and takes the place of an unmarked ``App.tsx``
(or ``App.tsx.template``) in the same directory.  When the variant is not
active the marked file is skipped and the unmarked file is used.

Deciding whether an unmarked file is overridden needs to know its
siblings, so callers first build a :class:`VariantIndex` over the complete
tree and only then call :func:`resolve_name` per file.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from turbokit.errors import TemplateConfigError

if TYPE_CHECKING:
    from turbokit.engine.walker import CandidateFile

TEMPLATE_SUFFIX = ".template"
MARKER_PREFIX = "with-"


class Outcome(str, Enum):
    EMIT = "emit"
    SKIP = "skip"


@dataclass(frozen=True)
class ParsedName:
    """A raw template file name split into its parts."""

    raw: str
    name: str
    """Output name: template suffix stripped and marker segment removed."""
    variant: str | None
    """Variant tag of the marker (``"api"`` for ``with-api``), if any."""
    is_template: bool


@dataclass(frozen=True)
class NameResolution:
    """Result of resolving one file name against the active variant."""

    outcome: Outcome
    name: str | None = None
    reason: str = ""

    @property
    def emitted(self) -> bool:
        return self.outcome is Outcome.EMIT

    @classmethod
    def emit(cls, name: str) -> "NameResolution":
        return cls(Outcome.EMIT, name)

    @classmethod
    def skip(cls, reason: str) -> "NameResolution":
        return cls(Outcome.SKIP, None, reason)


def strip_template_suffix(name: str) -> str:
    """Remove a trailing ``.template`` from *name*, if present."""
    if name.endswith(TEMPLATE_SUFFIX):
        return name[: -len(TEMPLATE_SUFFIX)]
    return name


def parse_name(raw_name: str) -> ParsedName:
    """Split *raw_name* into output name and variant marker.

    Raises:
        TemplateConfigError: If the name carries more than one marker
            segment, or a marker with nothing after it.
    """
    is_template = raw_name.endswith(TEMPLATE_SUFFIX)
    stripped = strip_template_suffix(raw_name)
    parts = stripped.split(".")

    marker_positions = [
        i
        for i, part in enumerate(parts)
        if i > 0 and part.startswith(MARKER_PREFIX) and "".join(parts[:i])
    ]
    if not marker_positions:
        return ParsedName(raw_name, stripped, None, is_template)

    if len(marker_positions) > 1:
        raise TemplateConfigError(
            f"Template file name has more than one variant marker: {raw_name}"
        )

    pos = marker_positions[0]
    if pos == len(parts) - 1:
        raise TemplateConfigError(
            f"Variant marker must be followed by an extension: {raw_name}"
        )

    variant = parts[pos][len(MARKER_PREFIX):]
    if not variant:
        raise TemplateConfigError(f"Variant marker has no tag: {raw_name}")

    name = ".".join(parts[:pos] + parts[pos + 1:])
    return ParsedName(raw_name, name, variant, is_template)


def resolve_name(
    raw_name: str,
    variant: str | None,
    overridden: Iterable[str] = (),
) -> NameResolution:
    """Decide whether a file is emitted and under which name.

    Args:
        raw_name: File name as found in the template tree.
        variant: Active variant tag (``"api"``), or ``None`` for the base
            variant only.
        overridden: Output names in the same directory that are claimed by
            files of the active variant (see :meth:`VariantIndex.overridden`).
    """
    parsed = parse_name(raw_name)

    if parsed.variant is not None:
        if variant is not None and parsed.variant == variant:
            return NameResolution.emit(parsed.name)
        if variant is None:
            return NameResolution.skip(f"variant '{parsed.variant}' is not active")
        return NameResolution.skip(
            f"variant '{parsed.variant}' does not match active variant '{variant}'"
        )

    if parsed.name in set(overridden):
        return NameResolution.skip(f"overridden by the '{variant}' variant")
    return NameResolution.emit(parsed.name)


class VariantIndex:
    """Output names claimed by active-variant files, per directory."""

    def __init__(self, variant: str | None) -> None:
        self.variant = variant
        self._claimed: dict[Path, set[str]] = {}

    @classmethod
    def build(
        cls, candidates: Iterable["CandidateFile"], variant: str | None
    ) -> "VariantIndex":
        """Index a complete enumeration of a template tree."""
        index = cls(variant)
        for candidate in candidates:
            index.add(candidate)
        return index

    def add(self, candidate: "CandidateFile") -> None:
        if self.variant is None or candidate.parsed.variant != self.variant:
            return
        self._claimed.setdefault(candidate.relative_dir, set()).add(candidate.parsed.name)

    def overridden(self, directory: Path) -> frozenset[str]:
        return frozenset(self._claimed.get(directory, ()))
