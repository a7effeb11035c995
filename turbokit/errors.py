"""Error types for turbokit.

Every failure the CLI presents to the user is a :class:`TurbokitError`
carrying a category, an optional suggestion and an exit code.  Filesystem
and external-command failures are classified into specific subclasses by
:func:`wrap_filesystem_error` and :func:`wrap_command_error`.
"""

from __future__ import annotations

import errno
import sys
import traceback


class TurbokitError(Exception):
    """Base class for all user-facing turbokit errors."""

    category: str = "internal"
    suggestion: str | None = None
    exit_code: int = 1

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if suggestion is not None:
            self.suggestion = suggestion

    def format(self, verbose: bool = False) -> str:
        """Render the error for display, optionally with a traceback."""
        output = f"Error: {self.message}"
        if self.suggestion:
            output += f"\n\n  -> {self.suggestion}"
        if verbose and self.__traceback__ is not None:
            tb = "".join(traceback.format_tb(self.__traceback__))
            output += f"\n\nStack trace:\n{tb}"
        return output


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------


class FileSystemError(TurbokitError):
    """Generic filesystem failure."""

    category = "filesystem"


class DirectoryExistsError(FileSystemError):
    suggestion = (
        "Use --force to overwrite the existing directory, or choose a different path"
    )

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Directory already exists: {path}")


class ParentDirectoryNotFoundError(FileSystemError):
    def __init__(self, path: str, parent_path: str) -> None:
        self.path = path
        self.parent_path = parent_path
        super().__init__(
            f"Parent directory does not exist: {parent_path}",
            suggestion=f"Create the parent directory first:\n     mkdir -p {parent_path}",
        )


class PermissionDeniedError(FileSystemError):
    suggestion = "Check file permissions or try running with appropriate privileges"

    def __init__(self, path: str, operation: str) -> None:
        self.path = path
        self.operation = operation
        super().__init__(f"Permission denied: cannot {operation} {path}")


class TemplateNotFoundError(FileSystemError):
    suggestion = "This may indicate a corrupted installation. Try reinstalling turbokit."

    def __init__(self, template_path: str) -> None:
        self.template_path = template_path
        super().__init__(f"Template not found: {template_path}")


# ---------------------------------------------------------------------------
# Template defects
# ---------------------------------------------------------------------------


class MissingVariableError(TurbokitError):
    """A ``{{identifier}}`` placeholder has no value in the variable mapping."""

    category = "template"

    def __init__(
        self,
        identifier: str,
        available: list[str],
        source: str | None = None,
    ) -> None:
        self.identifier = identifier
        self.available = list(available)
        self.source = source
        location = f" in {source}" if source else ""
        super().__init__(
            f"Undefined template variable: {{{{{identifier}}}}}{location}. "
            f"Available variables: {', '.join(self.available)}"
        )

    def with_source(self, source: str) -> "MissingVariableError":
        """Return a copy of this error annotated with the template file."""
        return MissingVariableError(self.identifier, self.available, source=source)


class TemplateConfigError(TurbokitError):
    """The template set itself is inconsistent (bad variant names, collisions)."""

    category = "template"
    suggestion = "Fix the template set; this is not caused by your input."


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationFailedError(TurbokitError):
    category = "validation"


class InvalidProjectNameError(ValidationFailedError):
    suggestion = (
        "Use lowercase letters, numbers, and hyphens only (kebab-case).\n"
        "     Examples: my-app, cool-project-2"
    )

    def __init__(self, invalid_name: str) -> None:
        self.invalid_name = invalid_name
        super().__init__(f'Invalid project name: "{invalid_name}"')


class NoModulesSelectedError(ValidationFailedError):
    suggestion = "Select at least one app module: --web, --mobile, --api, or --storybook"

    def __init__(self) -> None:
        super().__init__("At least one app module must be selected")


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


class GitNotInstalledError(TurbokitError):
    category = "git"

    def __init__(self) -> None:
        if sys.platform == "darwin":
            hint = "Install git using Homebrew:\n     brew install git"
        elif sys.platform.startswith("linux"):
            hint = (
                "Install git using your package manager:\n"
                "     apt install git   # Debian/Ubuntu\n"
                "     dnf install git   # Fedora"
            )
        elif sys.platform == "win32":
            hint = "Download and install git from:\n     https://git-scm.com/download/win"
        else:
            hint = "Install git from https://git-scm.com/downloads"
        super().__init__("Git is not installed or not found in PATH", suggestion=hint)


class GitOperationError(TurbokitError):
    category = "git"

    def __init__(self, operation: str, stderr: str) -> None:
        self.operation = operation
        self.stderr = stderr
        suggestion = None
        if "not a git repository" in stderr:
            suggestion = "Initialize a git repository first with: git init"
        elif "Permission denied" in stderr:
            suggestion = "Check your SSH keys or repository permissions"
        super().__init__(
            f"Git {operation} failed: {stderr.strip() or 'Unknown error'}",
            suggestion=suggestion,
        )


# ---------------------------------------------------------------------------
# External commands
# ---------------------------------------------------------------------------


class BunNotInstalledError(TurbokitError):
    category = "command"
    suggestion = (
        "Install Bun from https://bun.sh:\n"
        "     curl -fsSL https://bun.sh/install | bash"
    )

    def __init__(self) -> None:
        super().__init__("Bun is not installed or not found in PATH")


class DependencyInstallError(TurbokitError):
    category = "network"

    def __init__(self, stderr: str) -> None:
        self.stderr = stderr
        if "ENOTFOUND" in stderr or "network" in stderr:
            suggestion = "Check your internet connection and try again"
        elif "EACCES" in stderr or "permission" in stderr:
            suggestion = "Check folder permissions or try running without sudo"
        else:
            suggestion = (
                "Try running 'bun install' manually in the project directory.\n"
                f"     Error details: {stderr[:200]}"
            )
        super().__init__("Failed to install dependencies", suggestion=suggestion)


class CommandFailedError(TurbokitError):
    category = "command"

    def __init__(self, command: str, returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command failed (exit {returncode}): {command}",
            suggestion=stderr[:300] or None,
        )


# ---------------------------------------------------------------------------
# User action
# ---------------------------------------------------------------------------


class OperationCancelledError(TurbokitError):
    """The user aborted the run.  Not a failure: exits with status 0."""

    category = "cancelled"
    exit_code = 0

    def __init__(self, message: str = "Operation cancelled by user") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Classification helpers
# ---------------------------------------------------------------------------


def wrap_filesystem_error(
    error: BaseException, path: str, operation: str
) -> TurbokitError:
    """Map an ``OSError`` (or anything else) to a specific :class:`TurbokitError`."""
    if isinstance(error, TurbokitError):
        return error

    if isinstance(error, OSError):
        code = error.errno
        if code == errno.ENOENT:
            return FileSystemError(
                f"File or directory not found: {path}",
                suggestion="Check that the path exists and is spelled correctly",
            )
        if code in (errno.EACCES, errno.EPERM):
            return PermissionDeniedError(path, operation)
        if code == errno.EEXIST:
            return DirectoryExistsError(path)
        if code == errno.ENOSPC:
            return FileSystemError(
                f"No space left on device while {operation}: {path}",
                suggestion="Free up disk space and try again",
            )
        if code in (errno.EMFILE, errno.ENFILE):
            return FileSystemError(
                f"Too many open files while {operation}: {path}",
                suggestion="Close some applications or increase system file limits",
            )
        return FileSystemError(f"Failed to {operation} {path}: {error.strerror or error}")

    return FileSystemError(f"Unknown error during {operation}: {path}")


def _is_not_installed(stderr: str) -> bool:
    return "command not found" in stderr or "not recognized" in stderr


def wrap_command_error(command: str, returncode: int, stderr: str) -> TurbokitError:
    """Classify a failed external command by tool and diagnostic output."""
    parts = command.split()
    tool = parts[0] if parts else ""

    if tool == "git":
        if _is_not_installed(stderr):
            return GitNotInstalledError()
        operation = parts[1] if len(parts) > 1 else "operation"
        return GitOperationError(operation, stderr)

    if tool in ("bun", "bunx"):
        if _is_not_installed(stderr):
            return BunNotInstalledError()
        if "install" in parts[1:2]:
            return DependencyInstallError(stderr)

    return CommandFailedError(command, returncode, stderr)
