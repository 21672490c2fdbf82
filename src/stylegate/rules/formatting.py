"""Formatting rules over raw source text plus formatter/linter presence."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stylegate.model import CONFIG, SOURCE_KINDS, STYLE, StyleFacts, ToolConfigFacts
from stylegate.rules.registry import NodeRule, ProjectRule

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.model import ProjectModel, ProjectNode
    from stylegate.rules.registry import RawFinding, RuleContext


def _check_no_tabs(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    for lineno, text in enumerate(node.lines(), start=1):
        indent = text[: len(text) - len(text.lstrip(" \t"))]
        col = indent.find("\t")
        if col != -1:
            yield ctx.finding(node.path, line=lineno, column=col + 1)


def _check_line_length(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    limit = int(ctx.option("max_length", 100))
    for lineno, text in enumerate(node.lines(), start=1):
        if len(text) > limit:
            yield ctx.finding(node.path, line=lineno, column=limit + 1, length=len(text), max=limit)


def _check_final_newline(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    content = node.content
    if content and not content.endswith("\n"):
        yield ctx.finding(node.path, line=content.count("\n") + 1)


def _check_trailing_whitespace(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    for lineno, text in enumerate(node.lines(), start=1):
        stripped = text.rstrip(" \t")
        if stripped != text:
            yield ctx.finding(node.path, line=lineno, column=len(stripped) + 1)


def _check_no_important(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, StyleFacts):
        return
    for line, column in facts.important:
        yield ctx.finding(node.path, line=line, column=column)


def _has_sources(model: ProjectModel) -> bool:
    return any(n.kind in SOURCE_KINDS for n in model.files())


def _tool_roles(model: ProjectModel) -> set[str]:
    return {n.unit.role for n in model.parsed(CONFIG) if isinstance(n.unit, ToolConfigFacts)}


def _check_formatter_config(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Projects with source files carry a formatter configuration."""
    if _has_sources(model) and "formatter" not in _tool_roles(model):
        yield ctx.finding(".", role="formatter", expected=".prettierrc")


def _check_linter_config(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Projects with source files carry a linter configuration."""
    if _has_sources(model) and "linter" not in _tool_roles(model):
        yield ctx.finding(".", role="linter", expected="eslint.config.js")


RULES = (
    NodeRule(
        id="formatting-no-tabs",
        domain="formatting",
        default_severity="warning",
        message="Indentation uses a tab character",
        description="Indent with spaces.",
        check=_check_no_tabs,
        kinds=frozenset(SOURCE_KINDS),
    ),
    NodeRule(
        id="formatting-max-line-length",
        domain="formatting",
        default_severity="warning",
        message="Line is {length} characters long (max {max})",
        description="Lines stay within the configured width.",
        check=_check_line_length,
        kinds=frozenset(SOURCE_KINDS),
        enabled_by_default=False,
        options={"max_length": 100},
    ),
    NodeRule(
        id="formatting-final-newline",
        domain="formatting",
        default_severity="info",
        message="File does not end with a newline",
        description="Files end with a single newline.",
        check=_check_final_newline,
        kinds=frozenset(SOURCE_KINDS),
    ),
    NodeRule(
        id="formatting-trailing-whitespace",
        domain="formatting",
        default_severity="info",
        message="Trailing whitespace",
        description="Lines carry no trailing spaces or tabs.",
        check=_check_trailing_whitespace,
        kinds=frozenset(SOURCE_KINDS),
    ),
    NodeRule(
        id="formatting-no-important",
        domain="formatting",
        default_severity="info",
        message="Avoid !important",
        description="Stylesheets do not rely on !important.",
        check=_check_no_important,
        kinds=frozenset({STYLE}),
    ),
    ProjectRule(
        id="formatting-formatter-config",
        domain="formatting",
        default_severity="warning",
        message="No {role} configuration found (for example {expected})",
        description="A code formatter is configured for the project.",
        check=_check_formatter_config,
    ),
    ProjectRule(
        id="formatting-linter-config",
        domain="formatting",
        default_severity="warning",
        message="No {role} configuration found (for example {expected})",
        description="A linter is configured for the project.",
        check=_check_linter_config,
    ),
)
