"""Configuration validation run before generation."""

from __future__ import annotations

from dataclasses import dataclass

from turbokit.config import ProjectConfig
from turbokit.errors import (
    InvalidProjectNameError,
    NoModulesSelectedError,
    ParentDirectoryNotFoundError,
)
from turbokit.utils import exists, is_empty_dir, is_valid_package_name


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    suggestion: str | None = None


def validate_config(config: ProjectConfig, force: bool = False) -> list[ValidationIssue]:
    """Check *config* and return every problem found (empty when valid)."""
    issues: list[ValidationIssue] = []
    name = config.project_name

    if not name:
        issues.append(ValidationIssue("project_name", "Project name is required"))
    elif not is_valid_package_name(name):
        issues.append(
            ValidationIssue(
                "project_name",
                f'Invalid project name: "{name}"',
                "Use lowercase letters, numbers, and hyphens only (kebab-case)",
            )
        )

    if name.startswith((".", "_")):
        issues.append(
            ValidationIssue(
                "project_name",
                "Project name cannot start with a dot or underscore",
                "Remove the leading dot or underscore",
            )
        )

    path = config.project_path
    parent = path.parent
    if not exists(parent):
        issues.append(
            ValidationIssue(
                "project_path",
                f"Parent directory does not exist: {parent}",
                "Create the parent directory first or use a different path",
            )
        )

    if exists(path) and not is_empty_dir(path) and not force:
        issues.append(
            ValidationIssue(
                "project_path",
                f"Directory already exists and is not empty: {path}",
                "Use --force to overwrite, or choose a different path",
            )
        )

    if not config.modules.has_app():
        issues.append(
            ValidationIssue(
                "modules",
                "At least one app module must be selected",
                "Select web, mobile, api, or storybook",
            )
        )

    return issues


def format_validation_errors(issues: list[ValidationIssue]) -> str:
    if not issues:
        return ""

    lines = ["Validation errors:"]
    for issue in issues:
        lines.append(f"\n  x {issue.message}")
        if issue.suggestion:
            lines.append(f"    -> {issue.suggestion}")
    return "\n".join(lines)


def ensure_valid(config: ProjectConfig) -> None:
    """Raise for the first problem that makes *config* impossible to generate.

    Directory existence is left to the generator, which knows about
    ``force``.

    Raises:
        InvalidProjectNameError: The name is empty or not a valid package name.
        ParentDirectoryNotFoundError: The project's parent directory is missing.
        NoModulesSelectedError: No app module is selected.
    """
    name = config.project_name
    if not is_valid_package_name(name) or name.startswith((".", "_")):
        raise InvalidProjectNameError(name)

    parent = config.project_path.parent
    if not exists(parent):
        raise ParentDirectoryNotFoundError(str(config.project_path), str(parent))

    if not config.modules.has_app():
        raise NoModulesSelectedError()
