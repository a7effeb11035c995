"""Unit tests for the Pydantic configuration models (turbokit.config).

Tests cover:
- ModuleSelection defaults, has_app, selected, from_names
- ProjectConfig immutability
- ProjectConfig.from_env
- Bundled templates directory
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from turbokit.config import (
    DEFAULT_MODULES,
    VERSIONS,
    ModuleSelection,
    ProjectConfig,
    get_templates_dir,
)

pytestmark = pytest.mark.unit


class TestModuleSelection:
    def test_defaults_all_off(self):
        modules = ModuleSelection()
        assert modules.selected() == []
        assert not modules.has_app()

    def test_ui_alone_is_not_an_app(self):
        assert not ModuleSelection(ui=True).has_app()

    @pytest.mark.parametrize("name", ["web", "mobile", "api", "storybook"])
    def test_each_app_counts(self, name):
        assert ModuleSelection(**{name: True}).has_app()

    def test_selected_order(self):
        modules = ModuleSelection(ui=True, web=True, api=True)
        assert modules.selected() == ["web", "api", "ui"]

    def test_from_names(self):
        modules = ModuleSelection.from_names(["mobile", "storybook"])
        assert modules.mobile and modules.storybook
        assert not modules.web

    def test_from_names_unknown(self):
        with pytest.raises(ValueError, match="desktop"):
            ModuleSelection.from_names(["web", "desktop"])

    def test_default_modules(self):
        assert DEFAULT_MODULES.selected() == ["web", "api", "ui"]

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_MODULES.web = False


class TestProjectConfig:
    def test_frozen(self, tmp_path: Path):
        config = ProjectConfig(project_name="a", project_path=tmp_path / "a", scope="a")
        with pytest.raises(ValidationError):
            config.project_name = "b"

    def test_default_modules(self, tmp_path: Path):
        config = ProjectConfig(project_name="a", project_path=tmp_path / "a", scope="a")
        assert config.modules == DEFAULT_MODULES

    def test_path_coerced(self, tmp_path: Path):
        config = ProjectConfig(project_name="a", project_path=str(tmp_path), scope="a")
        assert isinstance(config.project_path, Path)

    def test_from_env(self, tmp_path: Path):
        env = {
            "TURBOKIT_PROJECT_NAME": "env-app",
            "TURBOKIT_PROJECT_PATH": str(tmp_path / "somewhere"),
            "TURBOKIT_MODULES": "web, mobile",
        }
        with patch.dict(os.environ, env, clear=False):
            config = ProjectConfig.from_env()
        assert config.project_name == "env-app"
        assert config.scope == "env-app"
        assert config.project_path == (tmp_path / "somewhere").resolve()
        assert config.modules.selected() == ["web", "mobile"]

    def test_from_env_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = ProjectConfig.from_env()
        assert config.project_name == "my-project"
        assert config.project_path.name == "my-project"
        assert config.modules == DEFAULT_MODULES

    def test_from_env_relative_path_uses_cwd(self, tmp_path: Path):
        env = {"TURBOKIT_PROJECT_PATH": "out/app"}
        with patch.dict(os.environ, env, clear=True):
            config = ProjectConfig.from_env(tmp_path)
        assert config.project_path == (tmp_path / "out" / "app").resolve()

    def test_from_env_default_path_from_name(self, tmp_path: Path):
        with patch.dict(os.environ, {"TURBOKIT_PROJECT_NAME": "My App"}, clear=True):
            config = ProjectConfig.from_env(tmp_path)
        assert config.project_path == (tmp_path / "my-app").resolve()


class TestTemplates:
    def test_templates_dir_is_bundled(self):
        templates = get_templates_dir()
        assert (templates / "root").is_dir()
        assert (templates / "apps" / "web").is_dir()

    def test_versions_are_strings(self):
        assert all(isinstance(v, str) and v for v in VERSIONS.values())
