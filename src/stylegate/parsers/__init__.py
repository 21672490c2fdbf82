"""Source parsers - one pure function per file kind, each producing a fact sheet."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stylegate.model import COMPONENT, CONFIG, ROUTE, SCRIPT, STORE, STYLE
from stylegate.parsers.component import parse_component
from stylegate.parsers.routes import parse_routes
from stylegate.parsers.script import parse_script
from stylegate.parsers.store import parse_store
from stylegate.parsers.style import parse_style
from stylegate.parsers.tool_config import TOOL_FILES, parse_tool_config, tool_for

if TYPE_CHECKING:
    from collections.abc import Callable

    from stylegate.model import ParsedUnit

PARSERS: dict[str, Callable[[str, str], ParsedUnit]] = {
    COMPONENT: parse_component,
    SCRIPT: parse_script,
    STYLE: parse_style,
    STORE: parse_store,
    ROUTE: parse_routes,
    CONFIG: parse_tool_config,
}


def parse_file(path: str, kind: str, content: str) -> ParsedUnit | None:
    """Dispatch *content* to the parser for *kind*.

    Returns None for kinds without a parser (``other``, ``directory``).
    Raises :class:`~stylegate.errors.ParseError` when the content cannot be
    normalized.
    """
    parser = PARSERS.get(kind)
    if parser is None:
        return None
    return parser(path, content)


__all__ = [
    "PARSERS",
    "TOOL_FILES",
    "parse_component",
    "parse_file",
    "parse_routes",
    "parse_script",
    "parse_store",
    "parse_style",
    "parse_tool_config",
    "tool_for",
]
