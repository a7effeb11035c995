"""Console presentation of a run: dry-run file tree and the final summary.

These functions only read the paths and configuration they are given.
"""

from __future__ import annotations

from pathlib import Path

from rich.panel import Panel
from rich.tree import Tree

from turbokit.config import ProjectConfig
from turbokit.utils import console, print_summary_table

MODULE_LABELS: dict[str, str] = {
    "web": "Web app (apps/web)",
    "api": "API server (apps/api)",
    "mobile": "Mobile app (apps/mobile)",
    "storybook": "Storybook (apps/storybook)",
    "ui": "UI package (packages/ui)",
}

AVAILABLE_COMMANDS: list[tuple[str, str]] = [
    ("bun dev", "Start development servers"),
    ("bun build", "Build all packages"),
    ("bun lint", "Run linting"),
    ("bun test", "Run tests"),
    ("bun typecheck", "Check TypeScript types"),
]


def _nest(paths: list[Path], root: Path) -> dict[str, dict]:
    nested: dict[str, dict] = {}
    for path in paths:
        node = nested
        for part in path.relative_to(root).parts:
            node = node.setdefault(part, {})
    return nested


def _add_children(tree: Tree, node: dict[str, dict]) -> None:
    # Directories first, then files, each alphabetically.
    ordered = sorted(node.items(), key=lambda item: (not item[1], item[0]))
    for name, children in ordered:
        if children:
            _add_children(tree.add(f"[bold blue]{name}/[/bold blue]"), children)
        else:
            tree.add(name)


def build_tree(paths: list[Path], root: Path) -> Tree:
    """Build a Rich tree of *paths* relative to *root*."""
    tree = Tree(f"[bold]{root.name}/[/bold]")
    _add_children(tree, _nest(paths, root))
    return tree


def count_directories(paths: list[Path], root: Path) -> int:
    """Count the distinct directories below *root* that *paths* live in."""
    dirs: set[tuple[str, ...]] = set()
    for path in paths:
        parts = path.relative_to(root).parts[:-1]
        for depth in range(1, len(parts) + 1):
            dirs.add(parts[:depth])
    return len(dirs)


def print_dry_run(paths: list[Path], root: Path) -> None:
    console.print("\nDry run - files that would be created:\n")
    console.print(build_tree(paths, root))
    console.print()
    print_summary_table(
        {
            "Project": str(root),
            "Files": str(len(paths)),
            "Directories": str(count_directories(paths, root)),
        },
        title="Dry run summary",
    )


def print_summary(config: ProjectConfig, cwd: Path | None = None) -> None:
    """Print what was created and how to start working on it."""
    cwd = cwd or Path.cwd()
    modules = config.modules

    lines = [
        f'[bold green]Created project "{config.project_name}"[/bold green]'
        f" at {config.project_path}",
        "",
        "[bold]Included modules:[/bold]",
    ]
    for name in modules.selected():
        lines.append(f"  [green]+[/green] {MODULE_LABELS[name]}")
    lines.append("  [green]+[/green] Config package (packages/config)")
    lines.append("")

    cd_target = (
        config.project_name
        if config.project_path.parent == cwd
        else str(config.project_path)
    )
    lines.append("[bold]Next steps:[/bold]")
    lines.append(f"  cd {cd_target}")
    lines.append("  bun dev")
    lines.append("")
    lines.append("[bold]Available commands:[/bold]")
    for command, description in AVAILABLE_COMMANDS:
        lines.append(f"  {command:<14} {description}")

    console.print(Panel("\n".join(lines), title="[bold]turbokit[/bold]", border_style="green"))
