"""Tests for the script, stylesheet and tool-configuration parsers."""

from __future__ import annotations

import pytest

from stylegate.errors import ParseError
from stylegate.model import COMPONENT, STYLE, ComponentFacts, StyleFacts
from stylegate.parsers import parse_file
from stylegate.parsers.script import parse_script
from stylegate.parsers.style import parse_style
from stylegate.parsers.tool_config import parse_tool_config, tool_for

# ---------------------------------------------------------------------------
# Script modules
# ---------------------------------------------------------------------------


class TestScriptParser:
    def test_exports_and_imports(self) -> None:
        content = (
            "import { ref } from 'vue'\n"
            "import './styles.css'\n"
            "export const useCounter = () => {}\n"
            "export function helper() {}\n"
            "export { a as b, c }\n"
            "export default {}\n"
        )
        facts = parse_script("src/composables/counter.ts", content)
        assert facts.named_exports == ("useCounter", "helper", "b", "c")
        assert facts.default_export is True
        assert facts.imports == ("vue", "./styles.css")

    def test_empty_module(self) -> None:
        facts = parse_script("src/empty.ts", "")
        assert facts.named_exports == ()
        assert facts.default_export is False

    def test_unbalanced_module_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_script("src/main.ts", "createApp(App).mount('#app'\n")


# ---------------------------------------------------------------------------
# Stylesheets
# ---------------------------------------------------------------------------


class TestStyleParser:
    def test_rule_count_and_important(self) -> None:
        facts = parse_style("src/a.css", "a { color: red !important; }\n.b { margin: 0 }\n")
        assert facts.rule_count == 2
        assert facts.important == ((1, 16),)

    def test_comments_are_ignored(self) -> None:
        facts = parse_style("src/a.css", "/* { !important */\n.a { color: red; }\n")
        assert facts.rule_count == 1
        assert facts.important == ()

    def test_scss_line_comments_are_ignored(self) -> None:
        facts = parse_style("src/a.scss", "// .old { color: red !important; }\n.a { b: c }\n")
        assert facts.rule_count == 1
        assert facts.important == ()

    def test_unbalanced_braces_raise(self) -> None:
        with pytest.raises(ParseError, match="unbalanced"):
            parse_style("src/a.css", ".a { color: red;\n")

    def test_unterminated_comment_raises(self) -> None:
        with pytest.raises(ParseError, match="unterminated comment"):
            parse_style("src/a.css", ".a { }\n/* open\n")


# ---------------------------------------------------------------------------
# Tool configuration
# ---------------------------------------------------------------------------


class TestToolConfigParser:
    def test_yaml_prettierrc(self) -> None:
        facts = parse_tool_config(".prettierrc", "semi: false\nsingleQuote: true\n")
        assert facts.tool == "prettier"
        assert facts.role == "formatter"
        assert facts.setting("semi") == "false"
        assert facts.setting("singleQuote") == "true"

    def test_json_eslintrc(self) -> None:
        content = '{"root": true, "rules": {"no-console": "warn"}}'
        facts = parse_tool_config(".eslintrc.json", content)
        assert facts.role == "linter"
        assert facts.setting("root") == "true"
        assert facts.setting("rules.no-console") == "warn"

    def test_script_config_primitives(self) -> None:
        content = (
            "module.exports = { semi: false, tabWidth: 2, trailingComma: 'all', plugins: [] }\n"
        )
        facts = parse_tool_config("prettier.config.js", content)
        assert facts.setting("semi") == "false"
        assert facts.setting("tabWidth") == "2"
        assert facts.setting("trailingComma") == "all"
        assert facts.setting("plugins") == "*"

    def test_flat_eslint_config(self) -> None:
        facts = parse_tool_config("eslint.config.js", "export default [{ rules: {} }]\n")
        assert facts.tool == "eslint"
        assert facts.setting("rules") == "*"

    def test_invalid_yaml_raises(self) -> None:
        with pytest.raises(ParseError, match="invalid prettier configuration"):
            parse_tool_config(".prettierrc", "semi: [\n")

    def test_empty_config(self) -> None:
        facts = parse_tool_config("vite.config.ts", "")
        assert facts.role == "build-tool"
        assert facts.settings == ()

    def test_tool_for_unknown_name(self) -> None:
        assert tool_for("package.json") is None


class TestParseFile:
    def test_dispatch_by_kind(self) -> None:
        assert isinstance(parse_file("src/A.vue", COMPONENT, ""), ComponentFacts)
        assert isinstance(parse_file("src/a.css", STYLE, ""), StyleFacts)

    def test_kind_without_parser(self) -> None:
        assert parse_file("README.md", "other", "# readme") is None
