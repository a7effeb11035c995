"""Git, dependency installation and git hook setup for generated projects.

All commands go through a *runner*: an async callable taking the argument
list and working directory and returning ``(returncode, stdout, stderr)``.
The default runner is :func:`turbokit.utils.run_command`; tests pass fakes.

Git initialisation, the initial commit and hook setup are conveniences and
only warn when they fail.  Dependency installation is required for the
generated workspace to be usable, so its failures raise.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from turbokit.errors import (
    BunNotInstalledError,
    DependencyInstallError,
    TurbokitError,
    wrap_command_error,
)
from turbokit.utils import make_executable, print_warning, run_command

logger = logging.getLogger(__name__)

Runner = Callable[[list[str], Path], Awaitable[tuple[int, str, str]]]

INITIAL_COMMIT_MESSAGE = "Initial commit from turbokit"


async def default_runner(cmd: list[str], cwd: Path) -> tuple[int, str, str]:
    return await run_command(cmd, cwd=cwd)


async def run_checked(cmd: list[str], cwd: Path, runner: Runner) -> str:
    """Run *cmd* and return its stdout.

    Raises:
        TurbokitError: Classified by :func:`wrap_command_error` when the
            command exits non-zero.
    """
    cmd_str = " ".join(cmd)
    logger.debug("Running: %s (in %s)", cmd_str, cwd)
    returncode, stdout, stderr = await runner(cmd, cwd)
    if returncode != 0:
        raise wrap_command_error(cmd_str, returncode, stderr)
    return stdout


async def is_tool_installed(tool: str, cwd: Path, runner: Runner) -> bool:
    returncode, stdout, _ = await runner([tool, "--version"], cwd)
    if returncode == 0:
        logger.debug("%s version: %s", tool, stdout)
    return returncode == 0


async def init_git(project_path: Path, runner: Runner) -> bool:
    """Initialise a git repository in *project_path*.

    Returns:
        ``True`` if a new repository was created.
    """
    if not await is_tool_installed("git", project_path, runner):
        print_warning("Git is not installed. Skipping repository initialization.")
        print_warning(
            'You can initialize the repository later with: '
            'git init && git add . && git commit -m "Initial commit"'
        )
        return False

    if (project_path / ".git").exists():
        logger.debug("Directory is already a git repository, skipping init")
        return False

    try:
        await run_checked(["git", "init"], project_path, runner)
    except TurbokitError as exc:
        print_warning(f"Failed to initialize git repository: {exc.message}")
        return False
    return True


async def create_initial_commit(
    project_path: Path,
    runner: Runner,
    message: str = INITIAL_COMMIT_MESSAGE,
) -> bool:
    """Stage everything and commit, skipping hooks for a clean first commit."""
    try:
        await run_checked(["git", "add", "."], project_path, runner)
        await run_checked(
            ["git", "commit", "--no-verify", "-m", message], project_path, runner
        )
    except TurbokitError as exc:
        print_warning(f"Failed to create initial commit: {exc.message}")
        print_warning(
            'You can commit manually with: git add . && git commit -m "Initial commit"'
        )
        return False
    return True


async def install_deps(project_path: Path, runner: Runner) -> None:
    """Run ``bun install`` in *project_path*.

    Raises:
        BunNotInstalledError: If ``bun`` is not on ``PATH``.
        DependencyInstallError: If the install exits non-zero.
    """
    if not await is_tool_installed("bun", project_path, runner):
        raise BunNotInstalledError()

    returncode, _, stderr = await runner(["bun", "install"], project_path)
    if returncode != 0:
        raise DependencyInstallError(stderr)


async def setup_husky(project_path: Path, runner: Runner) -> bool:
    """Install Husky hooks and make ``.husky/pre-commit`` executable.

    Requires ``node_modules`` (so :func:`install_deps` must run first).
    """
    if not (project_path / "node_modules").exists():
        print_warning("node_modules not found. Run `bun install` before setting up Husky.")
        return False

    try:
        await run_checked(["bunx", "husky", "install"], project_path, runner)
    except TurbokitError as exc:
        print_warning(f"Husky setup failed: {exc.message}")
        logger.debug("You can manually run `bunx husky install` later")
        return False

    pre_commit = project_path / ".husky" / "pre-commit"
    if not pre_commit.exists():
        logger.debug("No pre-commit hook found at %s", pre_commit)
        return True
    try:
        make_executable(pre_commit)
    except OSError as exc:
        print_warning(f"Failed to make pre-commit executable: {exc}")
        return False
    return True
