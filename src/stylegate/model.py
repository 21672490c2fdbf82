"""Project Model: classified file tree plus per-file structural facts."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.errors import CycleError, ParseError
    from stylegate.scanning.suppressions import SuppressionSet

# ---------------------------------------------------------------------------
# File kinds
# ---------------------------------------------------------------------------

FileKind = Literal[
    "directory",
    "component-file",
    "script-file",
    "style-file",
    "store-file",
    "route-file",
    "config-file",
    "other",
]

DIRECTORY: FileKind = "directory"
COMPONENT: FileKind = "component-file"
SCRIPT: FileKind = "script-file"
STYLE: FileKind = "style-file"
STORE: FileKind = "store-file"
ROUTE: FileKind = "route-file"
CONFIG: FileKind = "config-file"
OTHER: FileKind = "other"

PARSED_KINDS: frozenset[str] = frozenset({COMPONENT, SCRIPT, STYLE, STORE, ROUTE, CONFIG})
SOURCE_KINDS: frozenset[str] = frozenset({COMPONENT, SCRIPT, STYLE, STORE, ROUTE})

# ---------------------------------------------------------------------------
# Fact sheets (ParsedUnit variants)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropFact:
    """A declared component prop."""

    name: str
    type: str | None  # None when declared without a type (array syntax)
    line: int


@dataclass(frozen=True)
class EmitUse:
    """An ``emit('event')`` / ``$emit('event')`` call site."""

    name: str
    line: int
    column: int


@dataclass(frozen=True)
class ComponentFacts:
    """Facts extracted from a single-file component."""

    name: str
    name_declared: bool = False
    block_order: tuple[str, ...] = ()
    script_setup: bool = False
    script_lang: str | None = None
    scoped_style: bool = False
    props: tuple[PropFact, ...] = ()
    declared_emits: tuple[str, ...] = ()
    emits_declared: bool = False
    used_emits: tuple[EmitUse, ...] = ()
    kind: Literal["component-file"] = "component-file"

    @property
    def has_script(self) -> bool:
        return "script" in self.block_order

    @property
    def has_template(self) -> bool:
        return "template" in self.block_order

    @property
    def has_style(self) -> bool:
        return "style" in self.block_order


@dataclass(frozen=True)
class ScriptFacts:
    """Facts extracted from a plain script/logic module."""

    named_exports: tuple[str, ...] = ()
    default_export: bool = False
    imports: tuple[str, ...] = ()
    kind: Literal["script-file"] = "script-file"


@dataclass(frozen=True)
class StyleFacts:
    """Facts extracted from a stylesheet."""

    rule_count: int = 0
    important: tuple[tuple[int, int], ...] = ()  # (line, column) of each !important
    kind: Literal["style-file"] = "style-file"


@dataclass(frozen=True)
class StoreFacts:
    """Facts extracted from a ``defineStore`` definition."""

    store_id: str | None = None
    export_name: str | None = None
    style: str | None = None  # "options" | "setup"
    state_keys: tuple[str, ...] = ()
    getter_keys: tuple[str, ...] = ()
    action_keys: tuple[str, ...] = ()
    has_state: bool = False
    has_getters: bool = False
    has_actions: bool = False
    state_is_function: bool = True
    line: int = 1
    kind: Literal["store-file"] = "store-file"


@dataclass(frozen=True)
class RouteFact:
    """A single route record in a route table."""

    path: str
    name: str | None
    depth: int  # 1 for top-level routes
    has_guard: bool
    lazy: bool
    component: str | None
    line: int


@dataclass(frozen=True)
class RouteFacts:
    """Facts extracted from a router definition file."""

    routes: tuple[RouteFact, ...] = ()
    max_depth: int = 0
    global_guards: tuple[str, ...] = ()
    imports: tuple[tuple[str, str], ...] = ()  # (local binding, module path)
    kind: Literal["route-file"] = "route-file"

    @property
    def has_guards(self) -> bool:
        return bool(self.global_guards) or any(r.has_guard for r in self.routes)


@dataclass(frozen=True)
class ToolConfigFacts:
    """Facts extracted from a tool configuration file."""

    tool: str  # prettier, eslint, vite, webpack, tailwind, ...
    role: str  # formatter | linter | build-tool | css-framework
    settings: tuple[tuple[str, str], ...] = ()
    kind: Literal["config-file"] = "config-file"

    def setting(self, key: str) -> str | None:
        for name, value in self.settings:
            if name == key:
                return value
        return None


ParsedUnit = ComponentFacts | ScriptFacts | StyleFacts | StoreFacts | RouteFacts | ToolConfigFacts

# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectNode:
    """A directory or file in the scanned tree.

    Children are built before their parent; the parent links each child
    back to itself (weakly) when it is constructed.
    """

    path: str
    kind: FileKind
    unit: ParsedUnit | None = None
    children: tuple[ProjectNode, ...] = ()
    content: str = field(default="", compare=False, repr=False)
    _parent: weakref.ReferenceType[ProjectNode] | None = field(
        default=None, init=False, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        for child in self.children:
            object.__setattr__(child, "_parent", weakref.ref(self))

    @property
    def parent(self) -> ProjectNode | None:
        return self._parent() if self._parent is not None else None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def stem(self) -> str:
        name = self.name
        return name.split(".", 1)[0] if not name.startswith(".") else name

    @property
    def parts(self) -> tuple[str, ...]:
        if self.path == ".":
            return ()
        return tuple(self.path.split("/"))

    @property
    def is_leaf(self) -> bool:
        return self.kind != DIRECTORY

    def lines(self) -> list[str]:
        return self.content.splitlines()

    def walk(self) -> Iterator[ProjectNode]:
        """Yield this node and all descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class ProjectModel:
    """The in-memory tree of classified files plus parsed facts for one run."""

    root: ProjectNode
    parse_errors: tuple[ParseError, ...] = ()
    cycles: tuple[CycleError, ...] = ()
    suppressions: dict[str, SuppressionSet] = field(default_factory=dict, compare=False)

    def nodes(self) -> Iterator[ProjectNode]:
        return self.root.walk()

    def files(self, kind: str | None = None) -> list[ProjectNode]:
        """Return leaf nodes in path order, optionally filtered by kind."""
        leaves = [n for n in self.root.walk() if n.is_leaf]
        if kind is not None:
            leaves = [n for n in leaves if n.kind == kind]
        return sorted(leaves, key=lambda n: n.path)

    def parsed(self, kind: str | None = None) -> list[ProjectNode]:
        """Return leaf nodes that carry a ParsedUnit."""
        return [n for n in self.files(kind) if n.unit is not None]

    def get(self, path: str) -> ProjectNode | None:
        for node in self.root.walk():
            if node.path == path:
                return node
        return None

    def has_directory(self, path: str) -> bool:
        node = self.get(path)
        return node is not None and node.kind == DIRECTORY

    def snapshot(self) -> tuple[tuple[str, str, ParsedUnit | None], ...]:
        """Comparable (path, kind, unit) triples for every node."""
        return tuple(sorted(((n.path, n.kind, n.unit) for n in self.root.walk()), key=str))
