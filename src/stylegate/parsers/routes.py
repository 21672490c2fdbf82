"""Route-definition parser: route table, nesting depth and guard presence."""

from __future__ import annotations

import logging
import re

from stylegate.model import RouteFact, RouteFacts
from stylegate.parsers._lexer import (
    Entry,
    array_items,
    identifier,
    line_of,
    object_entries,
    string_value,
    value_offset,
)
from stylegate.parsers.syntax import check_syntax

logger = logging.getLogger(__name__)

# Safety cap: maximum routes recorded from a single file.
_MAX_ROUTES_PER_FILE = 500

_IMPORT_DEFAULT_RE = re.compile(
    r"""import\s+([A-Za-z_$][\w$]*)\s+from\s+['"]([^'"]+)['"]"""
)
_ROUTES_CONST_RE = re.compile(r"(?:const|let|var)\s+routes\b[^=\n]*=\s*\[")
_ROUTES_KEY_RE = re.compile(r"\broutes\s*:\s*\[")
_GLOBAL_GUARD_RE = re.compile(r"\b[A-Za-z_$][\w$]*\.(beforeEach|beforeResolve|afterEach)\s*\(")
_LAZY_IMPORT_RE = re.compile(r"""import\(\s*(?:/\*.*?\*/\s*)?['"]([^'"]+)['"]\s*\)""", re.DOTALL)

_GUARD_KEYS: frozenset[str] = frozenset({"beforeEnter"})


def _routes_array(content: str) -> int | None:
    """Return the offset of ``[`` opening the route table, if present."""
    for pattern in (_ROUTES_CONST_RE, _ROUTES_KEY_RE):
        match = pattern.search(content)
        if match is not None:
            return match.end() - 1
    return None


def _component_ref(value: str, imports: dict[str, str]) -> tuple[str | None, bool]:
    """Return ``(module-or-binding, lazy)`` for a route's ``component`` value."""
    lazy = _LAZY_IMPORT_RE.search(value)
    if lazy is not None:
        return lazy.group(1), True
    name = identifier(value)
    if name is not None:
        return imports.get(name, name), False
    return None, "=>" in value


def _collect(
    content: str,
    items: list[Entry],
    depth: int,
    imports: dict[str, str],
    out: list[RouteFact],
    path: str,
) -> int:
    """Append route records from *items*; return the deepest level reached."""
    deepest = depth if items else depth - 1
    for item in items:
        if not item.value.startswith("{"):
            continue
        route_path = ""
        name: str | None = None
        component: str | None = None
        lazy = False
        has_guard = False
        children: list[Entry] = []
        for entry in object_entries(content, item.offset, path=path):
            if entry.key == "path":
                route_path = string_value(entry.value) or ""
            elif entry.key == "name":
                name = string_value(entry.value)
            elif entry.key == "component":
                component, lazy = _component_ref(entry.value, imports)
            elif entry.key in _GUARD_KEYS:
                has_guard = True
            elif entry.key == "children":
                open_pos = value_offset(content, entry.offset)
                if open_pos is not None and content[open_pos] == "[":
                    children = array_items(content, open_pos, path=path)
        out.append(
            RouteFact(
                path=route_path,
                name=name,
                depth=depth,
                has_guard=has_guard,
                lazy=lazy,
                component=component,
                line=line_of(content, item.offset),
            )
        )
        if children:
            deepest = max(deepest, _collect(content, children, depth + 1, imports, out, path))
    return deepest


def parse_routes(path: str, content: str) -> RouteFacts:
    """Normalize a router definition into :class:`RouteFacts`."""
    if not content.strip():
        return RouteFacts()

    check_syntax(content, path=path)

    imports = {m.group(1): m.group(2) for m in _IMPORT_DEFAULT_RE.finditer(content)}
    guards = tuple(dict.fromkeys(m.group(1) for m in _GLOBAL_GUARD_RE.finditer(content)))

    routes: list[RouteFact] = []
    max_depth = 0
    open_pos = _routes_array(content)
    if open_pos is not None:
        items = array_items(content, open_pos, path=path)
        max_depth = max(0, _collect(content, items, 1, imports, routes, path))

    if len(routes) > _MAX_ROUTES_PER_FILE:
        logger.info(
            "Route cap hit: %d routes in %s, truncating to %d",
            len(routes),
            path,
            _MAX_ROUTES_PER_FILE,
        )
        routes = routes[:_MAX_ROUTES_PER_FILE]

    return RouteFacts(
        routes=tuple(routes),
        max_depth=max_depth,
        global_guards=guards,
        imports=tuple(sorted(imports.items())),
    )
