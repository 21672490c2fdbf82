"""Directory-layout rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stylegate.model import COMPONENT, ROUTE, SOURCE_KINDS, STORE, RouteFacts
from stylegate.rules._util import matches_any
from stylegate.rules.registry import NodeRule, ProjectRule

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.model import ProjectModel, ProjectNode
    from stylegate.rules.registry import RawFinding, RuleContext

_DEFAULT_SRC_EXEMPT = (
    "tests/**",
    "test/**",
    "e2e/**",
    "cypress/**",
    "scripts/**",
    "public/**",
    "*.config.*",
    "*.d.ts",
    "*.spec.*",
    "*.test.*",
)


def _check_src_root(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    src_dir = ctx.option("src_dir", "src")
    if node.parts[:1] == (src_dir,):
        return
    if matches_any(node.path, ctx.option("exempt", _DEFAULT_SRC_EXEMPT)):
        return
    yield ctx.finding(node.path, file=node.path, src_dir=src_dir)


def _check_store_location(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    dirs = tuple(ctx.option("dirs", ("stores", "store")))
    if any(part in dirs for part in node.parts[:-1]):
        return
    yield ctx.finding(node.path, file=node.path, expected=dirs[0])


def _check_component_location(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    dirs = tuple(ctx.option("dirs", ("components", "views", "pages", "layouts")))
    if any(part in dirs for part in node.parts[:-1]):
        return
    if node.stem in ctx.option("root_components", ("App",)):
        return
    yield ctx.finding(node.path, file=node.path, expected=", ".join(dirs))


def _route_targets(model: ProjectModel) -> set[str]:
    """Base names (without extension) of every module a route file references."""
    targets: set[str] = set()
    for node in model.parsed(ROUTE):
        facts = node.unit
        if not isinstance(facts, RouteFacts):
            continue
        for route in facts.routes:
            if route.component:
                targets.add(route.component.rsplit("/", 1)[-1].split(".", 1)[0])
        for _, module in facts.imports:
            targets.add(module.rsplit("/", 1)[-1].split(".", 1)[0])
    return targets


def _check_unrouted_views(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Report view components that no route file references."""
    if not model.parsed(ROUTE):
        return
    view_dirs = tuple(ctx.option("view_dirs", ("views", "pages")))
    targets = _route_targets(model)
    for node in model.files(COMPONENT):
        if not any(part in view_dirs for part in node.parts[:-1]):
            continue
        if node.stem not in targets:
            yield ctx.finding(node.path, file=node.path)


RULES = (
    NodeRule(
        id="structure-src-root",
        domain="structure",
        default_severity="warning",
        message="Source file '{file}' is outside the '{src_dir}/' directory",
        description="Application source files live under a single source root.",
        check=_check_src_root,
        kinds=frozenset(SOURCE_KINDS),
        options={"src_dir": "src", "exempt": list(_DEFAULT_SRC_EXEMPT)},
    ),
    NodeRule(
        id="structure-store-location",
        domain="structure",
        default_severity="warning",
        message="Store '{file}' should live under a '{expected}/' directory",
        description="State-store definitions are grouped in a stores directory.",
        check=_check_store_location,
        kinds=frozenset({STORE}),
        options={"dirs": ["stores", "store"]},
    ),
    NodeRule(
        id="structure-component-location",
        domain="structure",
        default_severity="info",
        message="Component '{file}' is not inside one of: {expected}",
        description="Components live in components/, views/, pages/ or layouts/.",
        check=_check_component_location,
        kinds=frozenset({COMPONENT}),
        options={"dirs": ["components", "views", "pages", "layouts"], "root_components": ["App"]},
    ),
    ProjectRule(
        id="structure-unrouted-view",
        domain="structure",
        default_severity="warning",
        message="View '{file}' is not referenced by any route",
        description="Every component under views/ or pages/ is reachable from the router.",
        check=_check_unrouted_views,
        options={"view_dirs": ["views", "pages"]},
    ),
)
