"""Tests for variant name resolution (turbokit.engine.variants)."""

from __future__ import annotations

from pathlib import Path

import pytest

from turbokit.engine.variants import (
    Outcome,
    VariantIndex,
    parse_name,
    resolve_name,
    strip_template_suffix,
)
from turbokit.engine.walker import walk
from turbokit.errors import TemplateConfigError

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# parse_name
# ---------------------------------------------------------------------------


class TestParseName:
    def test_plain_template(self):
        parsed = parse_name("package.json.template")
        assert parsed.name == "package.json"
        assert parsed.variant is None
        assert parsed.is_template

    def test_plain_file(self):
        parsed = parse_name("pre-commit")
        assert parsed.name == "pre-commit"
        assert not parsed.is_template

    def test_marker(self):
        parsed = parse_name("App.with-api.tsx.template")
        assert parsed.name == "App.tsx"
        assert parsed.variant == "api"

    def test_marker_without_template_suffix(self):
        parsed = parse_name("logo.with-api.png")
        assert parsed.name == "logo.png"
        assert parsed.variant == "api"
        assert not parsed.is_template

    def test_dotfile_is_not_a_marker(self):
        parsed = parse_name(".with-api.template")
        assert parsed.name == ".with-api"
        assert parsed.variant is None

    def test_leading_segment_is_never_a_marker(self):
        assert parse_name("with-api.ts").variant is None

    def test_multiple_markers_rejected(self):
        with pytest.raises(TemplateConfigError, match="more than one"):
            parse_name("App.with-api.with-web.tsx.template")

    def test_trailing_marker_rejected(self):
        with pytest.raises(TemplateConfigError):
            parse_name("App.with-api.template")

    def test_empty_tag_rejected(self):
        with pytest.raises(TemplateConfigError):
            parse_name("App.with-.tsx")

    def test_strip_template_suffix(self):
        assert strip_template_suffix("a.ts.template") == "a.ts"
        assert strip_template_suffix("a.ts") == "a.ts"


# ---------------------------------------------------------------------------
# resolve_name
# ---------------------------------------------------------------------------


class TestResolveName:
    def test_unmarked_emitted_without_variant(self):
        result = resolve_name("App.tsx.template", None)
        assert result.outcome is Outcome.EMIT
        assert result.name == "App.tsx"

    def test_marked_skipped_without_variant(self):
        result = resolve_name("App.with-api.tsx.template", None)
        assert result.outcome is Outcome.SKIP
        assert "not active" in result.reason

    def test_marked_emitted_for_matching_variant(self):
        result = resolve_name("App.with-api.tsx.template", "api")
        assert result.emitted
        assert result.name == "App.tsx"

    def test_marked_skipped_for_other_variant(self):
        result = resolve_name("App.with-api.tsx.template", "graphql")
        assert not result.emitted
        assert "graphql" in result.reason

    def test_unmarked_suppressed_when_overridden(self):
        result = resolve_name("App.tsx.template", "api", overridden={"App.tsx"})
        assert result.outcome is Outcome.SKIP
        assert result.name is None

    def test_unmarked_kept_when_other_names_overridden(self):
        result = resolve_name("main.tsx.template", "api", overridden={"App.tsx"})
        assert result.emitted
        assert result.name == "main.tsx"


# ---------------------------------------------------------------------------
# VariantIndex
# ---------------------------------------------------------------------------


class TestVariantIndex:
    def test_claims_are_per_directory(self, make_tree):
        root = make_tree({
            "App.tsx.template": "",
            "App.with-api.tsx.template": "",
            "nested/App.tsx.template": "",
        })
        index = VariantIndex.build(walk(root), "api")
        assert index.overridden(Path()) == frozenset({"App.tsx"})
        assert index.overridden(Path("nested")) == frozenset()

    def test_no_variant_claims_nothing(self, make_tree):
        root = make_tree({"App.with-api.tsx.template": ""})
        index = VariantIndex.build(walk(root), None)
        assert index.overridden(Path()) == frozenset()

    def test_other_variant_claims_nothing(self, make_tree):
        root = make_tree({"App.with-api.tsx.template": ""})
        index = VariantIndex.build(walk(root), "mobile")
        assert index.overridden(Path()) == frozenset()
