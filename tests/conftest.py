"""Shared pytest fixtures for the turbokit test suite.

Provides reusable fixtures for:
- Template variables and on-disk template trees
- Project configurations rooted in ``tmp_path``
- A fake async command runner standing in for git and bun
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from turbokit.config import ModuleSelection, ProjectConfig


# ---------------------------------------------------------------------------
# Template variables & trees
# ---------------------------------------------------------------------------


@pytest.fixture
def variables() -> dict[str, str]:
    """A small variable mapping used by engine tests."""
    return {
        "projectName": "demo-app",
        "scope": "demo-app",
        "year": "2024",
        "reactVersion": "^18.2.0",
    }


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Factory that writes a template tree and returns its root.

    Usage::

        def test_something(make_tree):
            root = make_tree({
                "package.json.template": '{"name": "{{projectName}}"}',
                "src/logo.png": b"\\x89PNG",
            })
    """
    counter = {"n": 0}

    def factory(files: dict[str, str | bytes], name: str | None = None) -> Path:
        counter["n"] += 1
        root = tmp_path / (name or f"templates-{counter['n']}")
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_bytes(content.encode("utf-8"))
        return root

    return factory


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., ProjectConfig]:
    """Factory for a ``ProjectConfig`` whose project lives under ``tmp_path``."""

    def factory(name: str = "demo-app", **modules: bool) -> ProjectConfig:
        selection = ModuleSelection(**modules) if modules else ModuleSelection(web=True)
        return ProjectConfig(
            project_name=name,
            project_path=tmp_path / name,
            scope=name,
            modules=selection,
        )

    return factory


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """Async stand-in for :func:`turbokit.vcs.default_runner`.

    Every call is recorded in ``calls`` as ``(cmd, cwd)``.  ``results`` maps
    a command string prefix (``"git init"``, ``"bun install"``) to the
    ``(returncode, stdout, stderr)`` tuple to return; unmatched commands
    succeed.  ``on_call`` hooks run for matching prefixes before returning,
    e.g. to create ``node_modules`` when ``bun install`` runs.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.results: dict[str, tuple[int, str, str]] = {}
        self.on_call: dict[str, Callable[[Path], Any]] = {}

    def fail(self, prefix: str, stderr: str = "boom", returncode: int = 1) -> None:
        self.results[prefix] = (returncode, "", stderr)

    @property
    def commands(self) -> list[str]:
        return [" ".join(cmd) for cmd, _ in self.calls]

    async def __call__(self, cmd: list[str], cwd: Path) -> tuple[int, str, str]:
        self.calls.append((list(cmd), cwd))
        command = " ".join(cmd)
        for prefix, hook in self.on_call.items():
            if command.startswith(prefix):
                hook(cwd)
        for prefix, result in self.results.items():
            if command.startswith(prefix):
                return result
        return (0, "", "")


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A ``FakeRunner`` whose ``bun install`` creates ``node_modules``."""
    runner = FakeRunner()
    runner.on_call["bun install"] = lambda cwd: (cwd / "node_modules").mkdir(exist_ok=True)
    return runner
