"""Router definition rules."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import TYPE_CHECKING

from stylegate.model import ROUTE, SCRIPT, RouteFacts
from stylegate.rules.registry import NodeRule, ProjectRule

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.model import ProjectModel, ProjectNode, RouteFact
    from stylegate.rules.registry import RawFinding, RuleContext

_GLOBAL_GUARD_RE = re.compile(r"\.(?:beforeEach|beforeResolve|afterEach)\s*\(")


def _label(route: RouteFact) -> str:
    return route.path or route.name or "<anonymous>"


def full_paths(facts: RouteFacts) -> list[tuple[str, RouteFact]]:
    """Resolve nested child paths against their parents.

    Routes are recorded parent-first, so a depth stack is enough to rebuild
    each route's absolute path.
    """
    stack: list[str] = []
    resolved: list[tuple[str, RouteFact]] = []
    for route in facts.routes:
        del stack[route.depth - 1 :]
        if route.path.startswith("/") or not stack:
            full = route.path
        else:
            full = stack[-1].rstrip("/") + "/" + route.path
        stack.append(full)
        resolved.append((full, route))
    return resolved


def _check_nesting_depth(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, RouteFacts):
        return
    limit = int(ctx.option("max_depth", 3))
    if facts.max_depth <= limit:
        return
    deepest = next((r for r in facts.routes if r.depth == facts.max_depth), None)
    yield ctx.finding(
        node.path,
        line=deepest.line if deepest is not None else None,
        depth=facts.max_depth,
        max=limit,
    )


def _check_named_routes(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, RouteFacts):
        return
    for route in facts.routes:
        # pure redirects and wrappers carry no view
        if route.name is None and route.component is not None:
            yield ctx.finding(node.path, line=route.line, route=_label(route))


def _check_lazy_views(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    facts = node.unit
    if not isinstance(facts, RouteFacts):
        return
    exempt = set(ctx.option("exempt", ()))
    for route in facts.routes:
        if route.component is None or route.lazy or route.path in exempt:
            continue
        yield ctx.finding(node.path, line=route.line, route=_label(route))


def _check_guard_present(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Require at least one navigation guard when the project defines routes."""
    tables = [(n.path, n.unit) for n in model.parsed(ROUTE) if isinstance(n.unit, RouteFacts)]
    if not any(facts.routes for _, facts in tables):
        return
    if any(facts.has_guards for _, facts in tables):
        return
    # guards are often installed from the entry module instead
    if any(_GLOBAL_GUARD_RE.search(n.content) for n in model.files(SCRIPT)):
        return
    yield ctx.finding(tables[0][0])


def _check_unique_paths(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Report absolute route paths defined more than once."""
    seen: dict[str, list[tuple[str, int]]] = defaultdict(list)
    for node in model.parsed(ROUTE):
        facts = node.unit
        if not isinstance(facts, RouteFacts):
            continue
        for full, route in full_paths(facts):
            if full and "*" not in full:
                seen[full].append((node.path, route.line))
    for route_path, sites in sorted(seen.items()):
        if len(sites) < 2:
            continue
        first_path, first_line = sites[0]
        yield ctx.finding(
            first_path,
            line=first_line,
            related=sorted({p for p, _ in sites[1:]} - {first_path}),
            route=route_path,
            count=len(sites),
        )


RULES = (
    NodeRule(
        id="router-max-nesting-depth",
        domain="router-shape",
        default_severity="warning",
        message="Route nesting depth {depth} exceeds the maximum of {max}",
        description="Nested child routes stay shallow.",
        check=_check_nesting_depth,
        kinds=frozenset({ROUTE}),
        options={"max_depth": 3},
    ),
    NodeRule(
        id="router-named-routes",
        domain="router-shape",
        default_severity="info",
        message="Route '{route}' has no name",
        description="Routes that render a view are named.",
        check=_check_named_routes,
        kinds=frozenset({ROUTE}),
    ),
    NodeRule(
        id="router-lazy-views",
        domain="router-shape",
        default_severity="info",
        message="Route '{route}' loads its view eagerly; use a lazy import",
        description="Route views are loaded with () => import(...).",
        check=_check_lazy_views,
        kinds=frozenset({ROUTE}),
        options={"exempt": ["/"]},
    ),
    ProjectRule(
        id="router-guard-present",
        domain="router-shape",
        default_severity="warning",
        message="No navigation guard is defined in any route file",
        description="The router installs at least one navigation guard.",
        check=_check_guard_present,
    ),
    ProjectRule(
        id="router-unique-path",
        domain="router-shape",
        default_severity="error",
        message="Route path '{route}' is defined {count} times",
        description="Every absolute route path is defined once.",
        check=_check_unique_paths,
    ),
)
