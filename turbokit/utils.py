"""Shared utility functions for turbokit.

Provides async command execution, file-system helpers, project-name helpers,
Rich-based console output and logging setup.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
import stat
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int = 600,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A missing executable is
        reported as returncode 127 with a "command not found" message, the
        same way a shell would.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        if isinstance(cmd, list):
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
        else:
            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
    except FileNotFoundError:
        program = cmd[0] if isinstance(cmd, list) else cmd.split()[0]
        return (127, "", f"{program}: command not found")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def exists(path: str | Path) -> bool:
    return Path(path).exists()


def is_empty_dir(path: str | Path) -> bool:
    """Return ``True`` if *path* has no entries.  Missing directories count as empty."""
    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except (FileNotFoundError, NotADirectoryError):
        return True


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def remove_dir(path: str | Path) -> None:
    """Recursively remove *path*; a missing directory is not an error."""
    if Path(path).exists():
        shutil.rmtree(path)


def make_executable(path: str | Path) -> None:
    """Set the file mode to ``0o755``."""
    Path(path).chmod(
        stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
    )


# ---------------------------------------------------------------------------
# Project name helpers
# ---------------------------------------------------------------------------

_PACKAGE_NAME_RE = re.compile(
    r"^(?:@[a-z0-9\-~][a-z0-9\-._~]*/)?[a-z0-9\-~][a-z0-9\-._~]*$"
)


def to_valid_dir_name(name: str) -> str:
    """Convert an arbitrary name to a kebab-case directory name.

    Examples::

        to_valid_dir_name("My Cool_App") -> "my-cool-app"
        to_valid_dir_name(".hidden")     -> "hidden"
    """
    result = name.strip().lower()
    result = re.sub(r"[\s_]+", "-", result)
    result = re.sub(r"[^a-z0-9-]", "", result)
    result = re.sub(r"^[-.]", "", result)
    result = re.sub(r"-+", "-", result)
    return re.sub(r"-$", "", result)


def is_valid_package_name(name: str) -> bool:
    """Return ``True`` if *name* is a valid npm package name (max 214 chars)."""
    return bool(_PACKAGE_NAME_RE.match(name)) and len(name) <= 214


def to_scope(project_name: str) -> str:
    """Derive the npm scope (without ``@``) from the project name."""
    return project_name


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step(current: int, total: int, message: str) -> None:
    """Print a ``[current/total]`` progress line."""
    console.print(f"[cyan][{current}/{total}][/cyan] {message}")


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]+[/bold green] {message}")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]x {message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]! {message}[/bold yellow]")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def setup_logging(verbose: bool = False) -> None:
    """Route stdlib logging through Rich.

    Module loggers (``logging.getLogger(__name__)``) emit DEBUG diagnostics
    when *verbose* is set; otherwise only warnings and errors are shown.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
