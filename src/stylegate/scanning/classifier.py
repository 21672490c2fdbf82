"""File classification: a pure function of (path, content) to a FileKind."""

from __future__ import annotations

import re

from stylegate.model import COMPONENT, CONFIG, OTHER, ROUTE, SCRIPT, STORE, STYLE, FileKind
from stylegate.parsers.tool_config import TOOL_FILES

COMPONENT_EXTENSIONS: frozenset[str] = frozenset({".vue"})
STYLE_EXTENSIONS: frozenset[str] = frozenset({".css", ".scss", ".sass", ".less", ".styl"})
SCRIPT_EXTENSIONS: frozenset[str] = frozenset(
    {".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"}
)
# Extensions whose content may be sniffed for component blocks.
SNIFF_EXTENSIONS: frozenset[str] = frozenset({".html", ".htm", ".svelte", ".component", ".sfc"})

CANDIDATE_EXTENSIONS: frozenset[str] = (
    COMPONENT_EXTENSIONS | STYLE_EXTENSIONS | SCRIPT_EXTENSIONS | SNIFF_EXTENSIONS
)

_TEMPLATE_BLOCK_RE = re.compile(r"^<template\b", re.MULTILINE)
_SCRIPT_BLOCK_RE = re.compile(r"^<script\b", re.MULTILINE)
_DEFINE_STORE_RE = re.compile(r"\bdefineStore\s*\(")
_CREATE_ROUTER_RE = re.compile(r"\bcreateRouter\s*\(")
_ROUTES_ARRAY_RE = re.compile(r"(?:\broutes\s*:\s*\[|(?:const|let|var)\s+routes\b[^=\n]*=\s*\[)")


def extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:].lower() if dot > 0 else ""


def is_candidate(path: str) -> bool:
    """Return True when *path* should be read for classification."""
    name = path.rsplit("/", 1)[-1]
    return name in TOOL_FILES or extension(path) in CANDIDATE_EXTENSIONS


def _looks_like_component(content: str) -> bool:
    return bool(_TEMPLATE_BLOCK_RE.search(content) and _SCRIPT_BLOCK_RE.search(content))


def classify(path: str, content: str) -> FileKind:
    """Return the FileKind of a file.

    Tool-config file names win over extensions; a file carrying both a
    top-level ``<template>`` and ``<script>`` block is a component whatever
    its extension.  Router files are recognised by ``createRouter(`` or by
    a ``routes`` array inside a ``router/`` directory.
    """
    name = path.rsplit("/", 1)[-1]
    if name in TOOL_FILES:
        return CONFIG

    ext = extension(path)
    if ext in COMPONENT_EXTENSIONS:
        return COMPONENT
    if ext in STYLE_EXTENSIONS:
        return STYLE
    if ext in SCRIPT_EXTENSIONS:
        if _DEFINE_STORE_RE.search(content):
            return STORE
        if _CREATE_ROUTER_RE.search(content):
            return ROUTE
        if "router" in path.split("/")[:-1] and _ROUTES_ARRAY_RE.search(content):
            return ROUTE
        return SCRIPT
    if ext in SNIFF_EXTENSIONS and _looks_like_component(content):
        return COMPONENT
    return OTHER
