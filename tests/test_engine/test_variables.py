"""Tests for placeholder substitution (turbokit.engine.variables).

Covers:
- Substitution of every placeholder
- Whitespace inside braces is not a placeholder
- Missing variables raise with the known identifiers listed
- Single-pass substitution
- build_variables contents and immutability
"""

from __future__ import annotations

from pathlib import Path

import pytest

from turbokit.config import VERSIONS, ModuleSelection, ProjectConfig
from turbokit.engine.variables import build_variables, render
from turbokit.errors import MissingVariableError

pytestmark = pytest.mark.unit


class TestRender:
    def test_substitutes_all_placeholders(self, variables):
        result = render("{{projectName}} / {{scope}} / {{year}}", variables)
        assert result == "demo-app / demo-app / 2024"

    def test_repeated_placeholder(self, variables):
        assert render("{{year}}-{{year}}", variables) == "2024-2024"

    def test_text_without_placeholders_unchanged(self, variables):
        text = "const a = { b: { c: 1 } };\n"
        assert render(text, variables) == text

    def test_empty_input(self, variables):
        assert render("", variables) == ""

    def test_empty_input_with_empty_mapping(self):
        assert render("", {}) == ""

    def test_whitespace_is_not_a_placeholder(self, variables):
        text = "key: ${{ runner.os }} and {{ projectName }}"
        assert render(text, variables) == text

    def test_dotted_identifier_is_not_a_placeholder(self, variables):
        assert render("{{github.sha}}", variables) == "{{github.sha}}"

    def test_missing_variable_raises(self, variables):
        with pytest.raises(MissingVariableError) as exc_info:
            render("hello {{unknownVar}}", variables)
        err = exc_info.value
        assert err.identifier == "unknownVar"
        assert set(err.available) == set(variables)
        assert "unknownVar" in err.message
        assert "projectName" in err.message

    def test_missing_variable_after_valid_ones(self, variables):
        with pytest.raises(MissingVariableError):
            render("{{projectName}} {{nope}}", variables)

    def test_values_are_not_rescanned(self):
        result = render("{{a}}", {"a": "{{b}}", "b": "x"})
        assert result == "{{b}}"

    def test_repeatable(self, variables):
        text = "name={{projectName}}\r\nscope=@{{scope}}\n"
        assert render(text, variables) == render(text, variables)
        assert render(text, variables) == "name=demo-app\r\nscope=@demo-app\n"


class TestBuildVariables:
    @pytest.fixture
    def config(self, tmp_path: Path) -> ProjectConfig:
        return ProjectConfig(
            project_name="acme",
            project_path=tmp_path / "acme",
            scope="acme",
            modules=ModuleSelection(web=True),
        )

    def test_project_values(self, config):
        variables = build_variables(config, year="2030")
        assert variables["projectName"] == "acme"
        assert variables["scope"] == "acme"
        assert variables["year"] == "2030"

    def test_version_values(self, config):
        variables = build_variables(config)
        assert variables["reactVersion"] == VERSIONS["react"]
        assert variables["honoVersion"] == VERSIONS["hono"]
        assert variables["huskyVersion"] == VERSIONS["husky"]

    def test_default_year_is_four_digits(self, config):
        year = build_variables(config)["year"]
        assert len(year) == 4 and year.isdigit()

    def test_all_values_are_strings(self, config):
        assert all(isinstance(v, str) for v in build_variables(config).values())

    def test_mapping_is_read_only(self, config):
        variables = build_variables(config)
        with pytest.raises(TypeError):
            variables["projectName"] = "other"  # type: ignore[index]
