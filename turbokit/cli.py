"""Command-line entry point.

Usage::

    turbokit --name my-app --web --api --ui
    turbokit --name my-app --web --dry-run
    python -m turbokit.cli --name my-app --mobile --api
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import traceback
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from turbokit.config import ModuleSelection, ProjectConfig
from turbokit.errors import OperationCancelledError, TurbokitError
from turbokit.generator import ProjectGenerator
from turbokit.reporter import print_dry_run, print_summary
from turbokit.utils import (
    console,
    print_error,
    print_success,
    setup_logging,
    to_scope,
    to_valid_dir_name,
)
from turbokit.validate import format_validation_errors, validate_config

logger = logging.getLogger(__name__)

MODULE_FLAGS = ("web", "mobile", "api", "storybook", "ui")


def _package_version() -> str:
    try:
        return version("turbokit")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="turbokit",
        description="turbokit -- generate Turborepo-based monorepo projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  turbokit --name my-app --web --api --ui\n"
            "  turbokit --name my-app --web\n"
            "  turbokit --name my-app --web --api --dry-run\n"
        ),
    )
    parser.add_argument("--name", help="Project name (kebab-case)")
    parser.add_argument("--path", help="Target directory (default: ./<name>)")

    parser.add_argument("--web", action="store_true", help="Include web app (React + Vite)")
    parser.add_argument("--mobile", action="store_true", help="Include mobile app (Expo)")
    parser.add_argument("--api", action="store_true", help="Include API server (Bun + Hono)")
    parser.add_argument("--storybook", action="store_true", help="Include Storybook app")
    parser.add_argument("--ui", action="store_true", help="Include shared UI package")

    parser.add_argument("--dry-run", action="store_true", help="Print file tree without writing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed output")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing directory")
    parser.add_argument(
        "--version", action="version", version=f"turbokit {_package_version()}"
    )
    return parser


def build_config(args: argparse.Namespace, cwd: Path | None = None) -> ProjectConfig:
    """Turn parsed flags into a ``ProjectConfig``.

    Flags win over the ``TURBOKIT_*`` environment (see
    :meth:`ProjectConfig.from_env`).  Without ``--path`` the project goes
    into ``./<name>`` converted to a directory name.  Without any module
    flag the environment or default selection is used.
    """
    cwd = cwd or Path.cwd()
    base = ProjectConfig.from_env(cwd)

    name = args.name or base.project_name
    if args.path:
        path = Path(args.path)
    elif args.name:
        path = Path(to_valid_dir_name(name) or name)
    else:
        path = base.project_path
    if not path.is_absolute():
        path = cwd / path

    if any(getattr(args, flag) for flag in MODULE_FLAGS):
        modules = ModuleSelection(**{flag: getattr(args, flag) for flag in MODULE_FLAGS})
    else:
        modules = base.modules

    return ProjectConfig(
        project_name=name,
        project_path=path.resolve(),
        scope=to_scope(name),
        modules=modules,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = build_config(args)
        logger.debug("Project config: %s", config.model_dump_json(indent=2))

        issues = validate_config(config, force=args.force)
        if issues:
            print_error("Configuration validation failed:")
            console.print(format_validation_errors(issues), markup=False)
            return 1
        print_success("Configuration validated")

        generator = ProjectGenerator(config)
        if args.dry_run:
            print_dry_run(generator.dry_run_paths(), config.project_path)
            return 0

        asyncio.run(generator.generate(force=args.force))
        print_summary(config)
        return 0

    except (OperationCancelledError, KeyboardInterrupt) as exc:
        message = exc.message if isinstance(exc, OperationCancelledError) else "Operation cancelled."
        console.print(f"\n{message}")
        return 0
    except TurbokitError as exc:
        console.print(f"\n{exc.format(args.verbose)}\n", style="red", markup=False)
        return exc.exit_code
    except Exception as exc:
        console.print(f"\nError: {exc}", style="red", markup=False)
        if args.verbose:
            console.print("\nStack trace:", markup=False)
            console.print(traceback.format_exc(), markup=False)
        return 1


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
