"""Naming-convention rules for components, stores, composables and routes."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from stylegate.model import (
    COMPONENT,
    ROUTE,
    SCRIPT,
    STORE,
    ComponentFacts,
    RouteFacts,
    ScriptFacts,
    StoreFacts,
)
from stylegate.rules._util import (
    KEBAB_CASE_RE,
    PASCAL_CASE_RE,
    find_line,
    pascal_case,
    split_words,
)
from stylegate.rules.registry import NodeRule

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.model import ProjectNode
    from stylegate.rules.registry import RawFinding, RuleContext


def _check_pascal_filename(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    stem = node.stem
    if stem in ctx.option("exempt", ("index",)):
        return
    if PASCAL_CASE_RE.match(stem):
        return
    yield ctx.finding(node.path, name=node.name, expected=pascal_case(stem) or stem)


def _check_multi_word(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, ComponentFacts):
        return
    if facts.name in ctx.option("exempt", ("App",)) or node.stem == "index":
        return
    if len(split_words(facts.name)) >= 2:
        return
    line = None
    if facts.name_declared:
        line = find_line(node.content, re.compile(r"\bname\s*:\s*['\"]" + re.escape(facts.name)))
    yield ctx.finding(node.path, line=line, name=facts.name)


def _check_store_export(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, StoreFacts) or facts.export_name is None:
        return
    suffix = ctx.option("suffix", "Store")
    pattern = re.compile(r"^use[A-Z][\w$]*" + re.escape(suffix) + "$")
    if not pattern.match(facts.export_name):
        yield ctx.finding(node.path, line=facts.line, name=facts.export_name, suffix=suffix)


def _check_composable_prefix(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, ScriptFacts):
        return
    dirs = tuple(ctx.option("dirs", ("composables",)))
    if not any(part in dirs for part in node.parts[:-1]):
        return
    for name in facts.named_exports:
        # types and constants are exempt
        if name[:1].isupper() or name.startswith("use"):
            continue
        line = find_line(node.content, re.compile(r"\b" + re.escape(name) + r"\b"))
        yield ctx.finding(node.path, line=line, name=name)


def _check_route_paths(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, RouteFacts):
        return
    for route in facts.routes:
        for segment in route.path.split("/"):
            if not segment or segment.startswith(":") or "*" in segment or "(" in segment:
                continue
            if not KEBAB_CASE_RE.match(segment):
                yield ctx.finding(node.path, line=route.line, route=route.path, segment=segment)
                break


RULES = (
    NodeRule(
        id="component-filename-pascal-case",
        domain="naming",
        default_severity="error",
        message="Component file name '{name}' is not PascalCase (expected '{expected}')",
        description="Single-file component file names use PascalCase.",
        check=_check_pascal_filename,
        kinds=frozenset({COMPONENT}),
        options={"exempt": ["index"]},
    ),
    NodeRule(
        id="component-name-multi-word",
        domain="naming",
        default_severity="warning",
        message="Component name '{name}' should be multi-word",
        description="Component names have at least two words so they never clash with HTML tags.",
        check=_check_multi_word,
        kinds=frozenset({COMPONENT}),
        options={"exempt": ["App"]},
    ),
    NodeRule(
        id="store-export-use-prefix",
        domain="naming",
        default_severity="warning",
        message="Store export '{name}' should follow the 'use...{suffix}' pattern",
        description="Store definitions are exported as useXxxStore.",
        check=_check_store_export,
        kinds=frozenset({STORE}),
        options={"suffix": "Store"},
    ),
    NodeRule(
        id="composable-use-prefix",
        domain="naming",
        default_severity="warning",
        message="Composable export '{name}' should start with 'use'",
        description="Functions exported from composables/ are named useXxx.",
        check=_check_composable_prefix,
        kinds=frozenset({SCRIPT}),
        options={"dirs": ["composables"]},
    ),
    NodeRule(
        id="route-path-kebab-case",
        domain="naming",
        default_severity="info",
        message="Route path '{route}' has non kebab-case segment '{segment}'",
        description="Static route path segments are lowercase kebab-case.",
        check=_check_route_paths,
        kinds=frozenset({ROUTE}),
    ),
)
