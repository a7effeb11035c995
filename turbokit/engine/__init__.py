"""Template resolution and assembly engine.

Quick usage::

    from turbokit.engine import CopyOptions, copy_template

    options = CopyOptions(variables={"projectName": "demo"}, variant="api")
    paths = copy_template("templates/apps/web", "/tmp/demo/apps/web", options)
"""

from turbokit.engine.planner import (
    CopyOptions,
    GenerationPlan,
    PlannedEntry,
    build_plan,
    copy_template,
    write_plan,
)
from turbokit.engine.variables import build_variables, render
from turbokit.engine.variants import NameResolution, Outcome, VariantIndex, resolve_name
from turbokit.engine.walker import (
    BINARY_EXTENSIONS,
    DEFAULT_EXCLUDE,
    CandidateFile,
    matches_pattern,
    walk,
)

__all__ = [
    "BINARY_EXTENSIONS",
    "DEFAULT_EXCLUDE",
    "CandidateFile",
    "CopyOptions",
    "GenerationPlan",
    "NameResolution",
    "Outcome",
    "PlannedEntry",
    "VariantIndex",
    "build_plan",
    "build_variables",
    "copy_template",
    "matches_pattern",
    "render",
    "resolve_name",
    "walk",
    "write_plan",
]
