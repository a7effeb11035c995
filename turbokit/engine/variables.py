"""Template variable substitution.

Placeholders are ``{{identifier}}`` where the identifier is made of word
characters only.  ``{{ name }}`` (with whitespace) is *not* a
placeholder, so double-brace syntax of other tools (GitHub Actions
expressions, Handlebars, ...) passes through untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from turbokit.config import VERSIONS, ProjectConfig
from turbokit.errors import MissingVariableError

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def render(text: str, variables: Mapping[str, str]) -> str:
    """Replace every ``{{identifier}}`` in *text* with its value.

    Replacement is a single pass: values are inserted verbatim and never
    re-scanned, so a value containing ``{{x}}`` is not expanded.

    Raises:
        MissingVariableError: If an identifier has no value.  Nothing is
            returned in that case.
    """
    if not text:
        return text

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        try:
            return variables[name]
        except KeyError:
            raise MissingVariableError(name, list(variables)) from None

    return PLACEHOLDER_PATTERN.sub(_substitute, text)


def build_variables(config: ProjectConfig, year: str | None = None) -> Mapping[str, str]:
    """Build the read-only variable mapping for one generation run."""
    values = {
        "projectName": config.project_name,
        "scope": config.scope,
        "year": year or str(datetime.now().year),
        "reactVersion": VERSIONS["react"],
        "typescriptVersion": VERSIONS["typescript"],
        "viteVersion": VERSIONS["vite"],
        "expoVersion": VERSIONS["expo"],
        "honoVersion": VERSIONS["hono"],
        "storybookVersion": VERSIONS["storybook"],
        "vitestVersion": VERSIONS["vitest"],
        "turboVersion": VERSIONS["turbo"],
        "eslintVersion": VERSIONS["eslint"],
        "prettierVersion": VERSIONS["prettier"],
        "huskyVersion": VERSIONS["husky"],
    }
    return MappingProxyType(values)
