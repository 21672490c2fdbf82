"""Single-file component shape rules."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import TYPE_CHECKING

from stylegate.model import COMPONENT, ComponentFacts
from stylegate.rules._util import find_line, join_paths, pascal_case
from stylegate.rules.registry import NodeRule, ProjectRule

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.model import ProjectModel, ProjectNode
    from stylegate.rules.registry import RawFinding, RuleContext

_STYLE_TAG_RE = re.compile(r"^<style\b", re.MULTILINE)
_TEMPLATE_TAG_RE = re.compile(r"^<template\b", re.MULTILINE)


def _facts(node: ProjectNode) -> ComponentFacts | None:
    return node.unit if isinstance(node.unit, ComponentFacts) else None


def _check_block_order(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = _facts(node)
    if facts is None:
        return
    expected = list(ctx.option("order", ("script", "template", "style")))
    # first occurrence of each known block, in file order
    seen = [b for b in dict.fromkeys(facts.block_order) if b in expected]
    ranks = [expected.index(b) for b in seen]
    if ranks != sorted(ranks):
        line = find_line(node.content, _TEMPLATE_TAG_RE)
        yield ctx.finding(
            node.path,
            line=line,
            actual=" > ".join(seen),
            expected=" > ".join(b for b in expected if b in seen),
        )


def _check_template(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = _facts(node)
    if facts is None or facts.has_template:
        return
    if facts.has_script and re.search(r"\brender\s*\(", node.content):
        return
    yield ctx.finding(node.path, name=facts.name)


def _check_typed_props(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = _facts(node)
    if facts is None:
        return
    for prop in facts.props:
        if prop.type is None:
            yield ctx.finding(node.path, line=prop.line, prop=prop.name)


def _check_declared_emits(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = _facts(node)
    if facts is None:
        return
    declared = set(facts.declared_emits)
    for use in facts.used_emits:
        if use.name not in declared:
            yield ctx.finding(node.path, line=use.line, column=use.column, event=use.name)


def _check_scoped_style(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = _facts(node)
    if facts is None or not facts.has_style or facts.scoped_style:
        return
    if node.stem in ctx.option("exempt", ("App",)):
        return
    yield ctx.finding(node.path, line=find_line(node.content, _STYLE_TAG_RE), name=facts.name)


def _check_unique_names(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Report component names declared by more than one file."""
    by_name: dict[str, list[str]] = defaultdict(list)
    for node in model.parsed(COMPONENT):
        facts = _facts(node)
        if facts is None or node.stem == "index":
            continue
        by_name[pascal_case(facts.name) or facts.name].append(node.path)
    for name, paths in sorted(by_name.items()):
        if len(paths) < 2:
            continue
        yield ctx.finding(
            paths[0],
            related=paths[1:],
            name=name,
            count=len(paths),
            paths=join_paths(paths),
        )


RULES = (
    NodeRule(
        id="component-block-order",
        domain="component-shape",
        default_severity="warning",
        message="Component blocks are ordered {actual}; expected {expected}",
        description="Blocks appear as <script>, <template>, <style>.",
        check=_check_block_order,
        kinds=frozenset({COMPONENT}),
        options={"order": ["script", "template", "style"]},
    ),
    NodeRule(
        id="component-require-template",
        domain="component-shape",
        default_severity="error",
        message="Component '{name}' has no <template> block",
        description="Every component renders markup from a <template> block or a render function.",
        check=_check_template,
        kinds=frozenset({COMPONENT}),
    ),
    NodeRule(
        id="component-typed-props",
        domain="component-shape",
        default_severity="warning",
        message="Prop '{prop}' is declared without a type",
        description="Props declare their types (no array shorthand).",
        check=_check_typed_props,
        kinds=frozenset({COMPONENT}),
    ),
    NodeRule(
        id="component-declared-emits",
        domain="component-shape",
        default_severity="error",
        message="Event '{event}' is emitted but not declared",
        description="Every emitted event is declared in defineEmits or emits.",
        check=_check_declared_emits,
        kinds=frozenset({COMPONENT}),
    ),
    NodeRule(
        id="component-scoped-style",
        domain="component-shape",
        default_severity="info",
        message="Styles of component '{name}' are not scoped",
        description="Component styles use the scoped (or module) attribute.",
        check=_check_scoped_style,
        kinds=frozenset({COMPONENT}),
        options={"exempt": ["App"]},
    ),
    ProjectRule(
        id="component-unique-name",
        domain="component-shape",
        default_severity="error",
        message="Component name '{name}' is used by {count} files: {paths}",
        description="No two components share a name.",
        check=_check_unique_names,
    ),
)
