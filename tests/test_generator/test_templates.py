"""Tests for hookgen.generator.templates."""

from __future__ import annotations

from pathlib import Path

import pytest

from hookgen.exceptions import TemplateError
from hookgen.generator.templates import compile_template


class TestCompileTemplate:
    def test_renders_context(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{% for name in names %}{{ name }};{% endfor %}\n", encoding="utf-8")
        assert compile_template(template, {"names": ["a", "b"]}) == "a;b;\n"

    def test_case_filters(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{{ tag | camel_case }} {{ tag | pascal_case }}", encoding="utf-8")
        assert compile_template(str(template), {"tag": "user admin"}) == "userAdmin UserAdmin"

    def test_no_html_escaping(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{{ code }}", encoding="utf-8")
        assert compile_template(template, {"code": "a<b> && c"}) == "a<b> && c"

    def test_includes_sibling_templates(self, tmp_path: Path) -> None:
        (tmp_path / "header.j2").write_text("// header\n", encoding="utf-8")
        template = tmp_path / "hooks.j2"
        template.write_text("{% include 'header.j2' %}body", encoding="utf-8")
        assert compile_template(template, {}) == "// header\nbody"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateError, match="file not found"):
            compile_template(tmp_path / "nope.j2", {})

    def test_syntax_error(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{% for x in %}", encoding="utf-8")
        with pytest.raises(TemplateError, match="Failed to compile template"):
            compile_template(template, {})

    def test_undefined_variable(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{{ missing }}", encoding="utf-8")
        with pytest.raises(TemplateError, match="missing"):
            compile_template(template, {})

    def test_exit_code(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateError) as exc_info:
            compile_template(tmp_path / "nope.j2", {})
        assert exc_info.value.exit_code == 8

    def test_runtime_error_in_template(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{{ 1 // 0 }}", encoding="utf-8")
        with pytest.raises(TemplateError, match="ZeroDivisionError"):
            compile_template(template, {})

    def test_filter_type_error(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{{ count | pascal_case }}", encoding="utf-8")
        with pytest.raises(TemplateError, match="Failed to compile template"):
            compile_template(template, {"count": 3})

    def test_undecodable_file(self, tmp_path: Path) -> None:
        template = tmp_path / "hooks.j2"
        template.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(TemplateError, match="UnicodeDecodeError"):
            compile_template(template, {})
