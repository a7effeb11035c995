"""turbokit -- scaffold Turborepo-based monorepo projects from templates.

Quick usage::

    from turbokit import ProjectConfig, ProjectGenerator

    generator = ProjectGenerator(config)
    paths = generator.dry_run_paths()
    await generator.generate()
"""

from turbokit.config import ModuleSelection, ProjectConfig
from turbokit.generator import ProjectGenerator

__all__ = [
    "ModuleSelection",
    "ProjectConfig",
    "ProjectGenerator",
]
