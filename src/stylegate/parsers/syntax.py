"""Script syntax validation with tree-sitter.

Fact extraction stays in the lexer helpers; this module only answers
whether a script body is well-formed, and where it first goes wrong.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Parser

from stylegate.errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Callable

    from tree_sitter import Node as TSNode

TYPESCRIPT = "typescript"
TSX = "tsx"


def _load_typescript() -> Language:
    return Language(tstypescript.language_typescript())


def _load_tsx() -> Language:
    return Language(tstypescript.language_tsx())


_DIALECT_LOADERS: dict[str, Callable[[], Language]] = {
    TYPESCRIPT: _load_typescript,
    TSX: _load_tsx,
}

# Extension / <script lang> value -> dialect.  Anything else is parsed as TypeScript.
_TSX_MARKERS: frozenset[str] = frozenset({".tsx", ".jsx", "tsx", "jsx"})

_LANG_CACHE: dict[str, Language] = {}


def dialect_for(marker: str | None) -> str:
    """Return the grammar for a file extension or ``<script lang>`` value."""
    if marker and marker.lower() in _TSX_MARKERS:
        return TSX
    return TYPESCRIPT


def get_language(dialect: str) -> Language:
    if dialect not in _LANG_CACHE:
        _LANG_CACHE[dialect] = _DIALECT_LOADERS[dialect]()
    return _LANG_CACHE[dialect]


def _first_error(node: TSNode) -> TSNode | None:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def check_syntax(
    source: str,
    *,
    path: str = "",
    dialect: str | None = None,
    first_line: int = 1,
) -> None:
    """Raise :class:`ParseError` unless *source* parses without errors.

    *first_line* is the line of *source*'s first character within the
    file, so errors in an embedded ``<script>`` block point at the file.
    Without *dialect* the grammar follows the extension of *path*.
    """
    if dialect is None:
        dialect = dialect_for(PurePosixPath(path).suffix)
    # Parser objects are not shared between scanner threads.
    parser = Parser(get_language(dialect))
    tree = parser.parse(source.encode("utf-8"))
    if not tree.root_node.has_error:
        return

    node = _first_error(tree.root_node) or tree.root_node
    if node.is_missing:
        msg = f"syntax error: missing '{node.type}'"
    else:
        msg = "syntax error"
    raise ParseError(msg, path=path, line=first_line + node.start_point[0])
