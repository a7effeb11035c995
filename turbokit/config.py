"""turbokit configuration.

Typed configuration for a generation run.  All settings use Pydantic v2
models so they are validated at construction time; the ``ProjectConfig`` is
frozen because every step of a run reads the same record.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Package versions substituted into templates.  Update these when upgrading.
VERSIONS: dict[str, str] = {
    "react": "^18.2.0",
    "reactDom": "^18.2.0",
    "typescript": "^5.3.0",
    "vite": "^5.0.0",
    "turbo": "^2.0.0",
    "expo": "~50.0.0",
    "reactNative": "0.73.0",
    "hono": "^3.11.0",
    "vitest": "^1.0.0",
    "storybook": "^7.6.0",
    "eslint": "^8.55.0",
    "prettier": "^3.1.0",
    "husky": "^8.0.0",
}


def get_templates_dir() -> Path:
    """Return the directory holding the bundled template roots."""
    return _DEFAULT_TEMPLATE_DIR


class ModuleSelection(BaseModel):
    """Which apps and packages go into the generated project."""

    model_config = ConfigDict(frozen=True)

    web: bool = Field(default=False, description="Web app (React + Vite)")
    mobile: bool = Field(default=False, description="Mobile app (Expo)")
    api: bool = Field(default=False, description="API server (Bun + Hono)")
    storybook: bool = Field(default=False, description="Storybook app")
    ui: bool = Field(default=False, description="Shared UI package")

    def has_app(self) -> bool:
        """Return ``True`` if at least one app module (not just ``ui``) is selected."""
        return self.web or self.mobile or self.api or self.storybook

    def selected(self) -> list[str]:
        """Return the names of the selected modules in declaration order."""
        return [name for name, enabled in self.model_dump().items() if enabled]

    @classmethod
    def from_names(cls, names: list[str]) -> "ModuleSelection":
        """Build a selection from module names such as ``["web", "api"]``."""
        unknown = sorted(set(names) - set(cls.model_fields))
        if unknown:
            raise ValueError(f"Unknown module(s): {', '.join(unknown)}")
        return cls(**{name: True for name in names})


DEFAULT_MODULES = ModuleSelection(web=True, api=True, ui=True)


class ProjectConfig(BaseModel):
    """Immutable description of the project to generate.

    Built once at the start of a run (from CLI flags or the environment) and
    passed unchanged to the generator, the validator and the reporter.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Project name in kebab-case")
    project_path: Path = Field(..., description="Absolute path of the project directory")
    scope: str = Field(..., description="npm scope without the leading '@'")
    modules: ModuleSelection = Field(default_factory=lambda: DEFAULT_MODULES)

    @classmethod
    def from_env(cls, cwd: Path | None = None) -> "ProjectConfig":
        """Build a ``ProjectConfig`` from environment variables.

        The CLI starts from this and overrides it with explicit flags.

        Recognised variables:
            TURBOKIT_PROJECT_NAME (default ``my-project``),
            TURBOKIT_PROJECT_PATH (default ``./<name>`` as a directory name),
            TURBOKIT_MODULES (comma separated, default web,api,ui).

        Relative paths are resolved against *cwd*, or the current directory.
        """
        from turbokit.utils import to_scope, to_valid_dir_name

        name = os.environ.get("TURBOKIT_PROJECT_NAME") or "my-project"
        raw_path = os.environ.get("TURBOKIT_PROJECT_PATH") or (to_valid_dir_name(name) or name)
        path = Path(raw_path)
        if not path.is_absolute():
            path = (cwd or Path.cwd()) / path

        modules = DEFAULT_MODULES
        raw_modules = os.environ.get("TURBOKIT_MODULES", "")
        names = [m.strip() for m in raw_modules.split(",") if m.strip()]
        if names:
            modules = ModuleSelection.from_names(names)

        return cls(
            project_name=name,
            project_path=path.resolve(),
            scope=to_scope(name),
            modules=modules,
        )
