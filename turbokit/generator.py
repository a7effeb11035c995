"""Main generation orchestrator.

Takes a ``ProjectConfig`` and assembles a complete Turborepo workspace from
the bundled template roots: root config, shared packages, the selected apps,
git hooks and CI workflows.  Then it initialises git, installs dependencies
and creates the first commit.

A run is all-or-nothing.  If any step fails (including the external
commands) the project directory is removed before the error propagates.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from turbokit.config import ModuleSelection, ProjectConfig, get_templates_dir
from turbokit.engine.planner import CopyOptions, GenerationPlan, build_plan, copy_template
from turbokit.engine.variables import build_variables
from turbokit.engine.walker import DEFAULT_EXCLUDE
from turbokit.errors import (
    DirectoryExistsError,
    OperationCancelledError,
    TemplateConfigError,
    wrap_filesystem_error,
)
from turbokit.utils import (
    ensure_dir,
    is_empty_dir,
    print_error,
    print_step,
    print_success,
    print_warning,
    remove_dir,
)
from turbokit.validate import ensure_valid
from turbokit.vcs import (
    Runner,
    create_initial_commit,
    default_runner,
    init_git,
    install_deps,
    setup_husky,
)

logger = logging.getLogger(__name__)

API_VARIANT = "api"

# create directory, git init, install, hooks, initial commit
_COMMAND_STEPS = 5


# ---------------------------------------------------------------------------
# Template step table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateStep:
    """One template root and where it lands in the project."""

    label: str
    source: str
    destination: str
    variant: str | None = None
    exclude: frozenset[str] = DEFAULT_EXCLUDE
    executable: frozenset[str] = frozenset()


def template_steps(modules: ModuleSelection) -> list[TemplateStep]:
    """Return the template roots for *modules* in copy order.

    The same table drives real generation and dry runs, so both always
    cover the same roots with the same options.
    """
    variant = API_VARIANT if modules.api else None

    steps = [
        TemplateStep("Copying root templates", "root", ".", variant=variant),
        TemplateStep("Setting up config package", "packages/config", "packages/config"),
    ]

    if modules.web:
        exclude = DEFAULT_EXCLUDE
        if not modules.api:
            exclude = exclude | {"api", ".env.example.template"}
        steps.append(
            TemplateStep(
                "Setting up web app", "apps/web", "apps/web", variant=variant, exclude=exclude
            )
        )

    if modules.mobile:
        exclude = DEFAULT_EXCLUDE
        if not modules.api:
            exclude = exclude | {"api", "config", ".env.example.template"}
        steps.append(
            TemplateStep(
                "Setting up mobile app",
                "apps/mobile",
                "apps/mobile",
                variant=variant,
                exclude=exclude,
            )
        )

    if modules.api:
        steps.append(TemplateStep("Setting up API server", "apps/api", "apps/api"))
        steps.append(
            TemplateStep(
                "Setting up API client package", "packages/api-client", "packages/api-client"
            )
        )

    if modules.storybook:
        steps.append(TemplateStep("Setting up Storybook", "apps/storybook", "apps/storybook"))

    if modules.ui:
        steps.append(TemplateStep("Setting up UI package", "packages/ui", "packages/ui"))

    steps.append(
        TemplateStep(
            "Setting up git hooks", "husky", ".husky", executable=frozenset({"pre-commit"})
        )
    )
    steps.append(TemplateStep("Setting up CI pipeline", "pipelines", ".github/workflows"))
    return steps


def calculate_total_steps(modules: ModuleSelection) -> int:
    """Number of progress steps a run with *modules* will report."""
    return len(template_steps(modules)) + _COMMAND_STEPS


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------


def add_workspace_dependency(package_json_path: Path, package_name: str) -> None:
    """Add ``package_name: "workspace:*"`` to a generated ``package.json``.

    Dependencies are re-sorted alphabetically.
    """
    try:
        content = package_json_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise wrap_filesystem_error(exc, str(package_json_path), "read") from exc

    try:
        pkg = json.loads(content)
    except json.JSONDecodeError as exc:
        raise TemplateConfigError(
            f"Generated {package_json_path} is not valid JSON: {exc}"
        ) from exc

    deps = dict(pkg.get("dependencies") or {})
    deps[package_name] = "workspace:*"
    pkg["dependencies"] = dict(sorted(deps.items()))

    try:
        package_json_path.write_text(json.dumps(pkg, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise wrap_filesystem_error(exc, str(package_json_path), "write") from exc


async def _in_thread(func, *args):
    """Run blocking *func* in a worker thread.

    Cancelling the caller does not abandon the thread: the cancellation is
    held back until *func* has returned, so nothing writes into the project
    directory after the rollback has removed it.
    """
    future = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        while not future.done():
            try:
                await asyncio.wait({future})
            except asyncio.CancelledError:
                continue
        if not future.cancelled():
            future.exception()  # mark retrieved
        raise


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Assembles a project directory from template roots.

    Args:
        config: The project to generate.
        templates_dir: Directory containing the template roots.  Defaults
            to the templates bundled with the package.
        runner: Async command runner used for git and bun.
        year: Value for the ``year`` template variable.  Defaults to the
            current year.
    """

    def __init__(
        self,
        config: ProjectConfig,
        templates_dir: str | Path | None = None,
        runner: Runner | None = None,
        year: str | None = None,
    ) -> None:
        self.config = config
        self.templates_dir = Path(templates_dir) if templates_dir else get_templates_dir()
        self.runner = runner or default_runner
        self.variables = build_variables(config, year=year)

    # -- Planning ----------------------------------------------------------

    def _options(self, step: TemplateStep, dry_run: bool) -> CopyOptions:
        return CopyOptions(
            variables=self.variables,
            exclude=step.exclude,
            variant=step.variant,
            dry_run=dry_run,
            executable=step.executable,
        )

    def _paths(self, step: TemplateStep) -> tuple[Path, Path]:
        return (
            self.templates_dir / step.source,
            self.config.project_path / step.destination,
        )

    def plan(self) -> GenerationPlan:
        """Build every entry of the run in memory, without writing anything."""
        plan = GenerationPlan()
        for step in template_steps(self.config.modules):
            source, destination = self._paths(step)
            plan.extend(build_plan(source, destination, self._options(step, dry_run=True)))
        return plan

    def dry_run_paths(self) -> list[Path]:
        """Return every path a real run would create, in creation order."""
        paths: list[Path] = []
        for step in template_steps(self.config.modules):
            source, destination = self._paths(step)
            paths.extend(copy_template(source, destination, self._options(step, dry_run=True)))
        return paths

    # -- Generation --------------------------------------------------------

    async def generate(self, force: bool = False) -> list[Path]:
        """Generate the project.

        Args:
            force: Replace an existing non-empty project directory.

        Returns:
            Every file written from templates, in creation order.

        Raises:
            ValidationFailedError: The configuration cannot be generated.
            DirectoryExistsError: The directory exists, is not empty and
                *force* is not set.  Nothing is touched in that case.
        """
        ensure_valid(self.config)
        project_path = self.config.project_path
        modules = self.config.modules

        if project_path.exists() and not is_empty_dir(project_path):
            if not force:
                raise DirectoryExistsError(str(project_path))
            print_warning("Overwriting existing directory")
            try:
                await _in_thread(remove_dir, project_path)
            except OSError as exc:
                raise wrap_filesystem_error(exc, str(project_path), "remove directory") from exc

        total = calculate_total_steps(modules)
        current = 0
        written: list[Path] = []

        try:
            current += 1
            print_step(current, total, "Creating project directory")
            try:
                await _in_thread(ensure_dir, project_path)
            except OSError as exc:
                raise wrap_filesystem_error(exc, str(project_path), "create directory") from exc

            for step in template_steps(modules):
                current += 1
                print_step(current, total, step.label)
                source, destination = self._paths(step)
                paths = await _in_thread(
                    copy_template, source, destination, self._options(step, dry_run=False)
                )
                written.extend(paths)

            await self._post_process()

            current += 1
            print_step(current, total, "Initializing git repository")
            repo_created = await init_git(project_path, self.runner)

            current += 1
            print_step(current, total, "Installing dependencies")
            await install_deps(project_path, self.runner)

            current += 1
            print_step(current, total, "Configuring git hooks")
            await setup_husky(project_path, self.runner)

            current += 1
            print_step(current, total, "Creating initial commit")
            if repo_created:
                await create_initial_commit(project_path, self.runner)
            else:
                logger.debug("No new repository was created, skipping initial commit")

        except BaseException as exc:
            self._cleanup(exc)
            raise

        print_success(f"Project created at {project_path}")
        return written

    async def _post_process(self) -> None:
        modules = self.config.modules
        if modules.web and modules.ui:
            await _in_thread(
                add_workspace_dependency,
                self.config.project_path / "apps" / "web" / "package.json",
                f"@{self.config.scope}/ui",
            )

    def _cleanup(self, exc: BaseException) -> None:
        """Remove the project directory after a failed or cancelled run.

        Runs synchronously: the surrounding task may already be cancelled.
        """
        cancelled = isinstance(
            exc, (OperationCancelledError, KeyboardInterrupt, asyncio.CancelledError)
        )
        if cancelled:
            print_warning("Generation cancelled, removing partial output...")
        else:
            print_error("Generation failed, cleaning up...")

        try:
            remove_dir(self.config.project_path)
        except OSError as cleanup_exc:
            print_warning(
                f"Could not remove {self.config.project_path}: {cleanup_exc}. "
                "Delete it manually before retrying."
            )
