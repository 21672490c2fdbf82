"""State-store parser: recognizes the state / getters / actions shape of ``defineStore``."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any

from stylegate.errors import ParseError
from stylegate.model import StoreFacts
from stylegate.parsers._lexer import (
    find_call,
    find_closing,
    line_of,
    object_entries,
    split_top_level,
    string_value,
    value_offset,
)
from stylegate.parsers.syntax import check_syntax

logger = logging.getLogger(__name__)

_EXPORT_RE = re.compile(r"export\s+(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*defineStore\b")
_SETUP_STATE_RE = re.compile(
    r"(?:const|let)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*"
    r"(?:ref|reactive|shallowRef|shallowReactive|useStorage|useLocalStorage)\b"
)
_SETUP_GETTER_RE = re.compile(r"(?:const|let)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*computed\b")
_SETUP_FUNCTION_RE = re.compile(r"(?:async\s+)?function\s+([A-Za-z_$][\w$]*)\s*\(")
_SETUP_ARROW_RE = re.compile(
    r"(?:const|let)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s*)?"
    r"(?:\([^()]*\)|[A-Za-z_$][\w$]*)\s*(?::[^=]+)?=>"
)
_ARROW_RETURNS_OBJECT_RE = re.compile(r"^(?:async\s*)?\(\s*\)\s*=>\s*\(\s*\{")
_FUNCTION_HEAD_RE = re.compile(r"^(?:async\s*)?(?:function\s*\w*\s*\(\s*\)|\(\s*\)\s*=>)\s*\{")
_METHOD_SHORTHAND_RE = re.compile(r"^state\s*\(")
_RETURN_OBJECT_RE = re.compile(r"\breturn\s*\{")


def _keys_at(content: str, open_pos: int, path: str) -> tuple[str, ...]:
    return tuple(e.key for e in object_entries(content, open_pos, path=path) if e.key)


def _returned_keys(content: str, body_pos: int, path: str) -> tuple[str, ...]:
    """Keys of the object literal returned from the function body at *body_pos*."""
    body_end = find_closing(content, body_pos, path=path)
    ret = _RETURN_OBJECT_RE.search(content, body_pos, body_end)
    return _keys_at(content, ret.end() - 1, path) if ret is not None else ()


def _state_keys(
    content: str, entry_offset: int, value: str, path: str
) -> tuple[tuple[str, ...], bool]:
    """Return ``(keys, is_function)`` for a ``state`` entry value."""
    if _METHOD_SHORTHAND_RE.match(value):
        return _returned_keys(content, content.index("{", entry_offset), path), True
    if value.startswith("{"):
        open_pos = value_offset(content, entry_offset)
        return (_keys_at(content, open_pos, path) if open_pos is not None else ()), False

    colon = content.index(":", entry_offset)
    start = colon + 1
    if _ARROW_RETURNS_OBJECT_RE.match(value):
        open_pos = content.index("{", start)
        return _keys_at(content, open_pos, path), True
    if _FUNCTION_HEAD_RE.match(value):
        return _returned_keys(content, content.index("{", start), path), True
    return (), True


def _parse_options_store(content: str, open_pos: int, path: str) -> dict[str, Any]:
    facts: dict[str, Any] = {"style": "options"}
    for entry in object_entries(content, open_pos, path=path):
        if entry.key == "id":
            facts["store_id"] = string_value(entry.value)
        elif entry.key == "state":
            keys, is_function = _state_keys(content, entry.offset, entry.value, path)
            facts["has_state"] = True
            facts["state_keys"] = keys
            facts["state_is_function"] = is_function
        elif entry.key in ("getters", "actions"):
            value_pos = value_offset(content, entry.offset)
            keys: tuple[str, ...] = ()
            if value_pos is not None and content[value_pos] == "{":
                keys = _keys_at(content, value_pos, path)
            facts[f"has_{entry.key}"] = True
            facts["getter_keys" if entry.key == "getters" else "action_keys"] = keys
    return facts


def _parse_setup_store(content: str, body_pos: int, path: str) -> dict[str, Any]:
    body_end = find_closing(content, body_pos, path=path)
    body = content[body_pos + 1 : body_end]
    state = tuple(dict.fromkeys(_SETUP_STATE_RE.findall(body)))
    getters = tuple(dict.fromkeys(_SETUP_GETTER_RE.findall(body)))
    actions = tuple(
        dict.fromkeys(_SETUP_FUNCTION_RE.findall(body) + _SETUP_ARROW_RE.findall(body))
    )
    return {
        "style": "setup",
        "state_keys": state,
        "getter_keys": getters,
        "action_keys": actions,
        "has_state": bool(state),
        "has_getters": bool(getters),
        "has_actions": bool(actions),
        "state_is_function": True,
    }


def parse_store(path: str, content: str) -> StoreFacts:
    """Normalize a ``defineStore`` module into :class:`StoreFacts`.

    Both the options form (``state`` / ``getters`` / ``actions`` in any order)
    and the setup-function form are recognized.
    """
    if not content.strip():
        return StoreFacts()

    check_syntax(content, path=path)

    call = find_call(content, "defineStore")
    if call is None:
        return StoreFacts()

    close = find_closing(content, call, path=path)
    args = split_top_level(content[call + 1 : close], call + 1, path=path)
    if not args:
        msg = "defineStore() called without arguments"
        raise ParseError(msg, path=path, line=line_of(content, call))

    facts: dict[str, Any] = {}
    first_text, first_offset = args[0]
    definition: tuple[str, int] | None = None
    if first_text.startswith("{"):
        definition = (first_text, first_offset)
    else:
        facts["store_id"] = string_value(first_text)
        if len(args) > 1:
            definition = args[1]

    if definition is not None:
        text, offset = definition
        if text.startswith("{"):
            facts.update(_parse_options_store(content, offset, path))
        else:
            arrow = re.compile(r"=>\s*\{").search(content, offset)
            if arrow is not None:
                facts.update(_parse_setup_store(content, arrow.end() - 1, path))

    export = _EXPORT_RE.search(content)
    store = replace(
        StoreFacts(export_name=export.group(1) if export else None, line=line_of(content, call)),
        **facts,
    )
    logger.debug("Parsed store %s: id=%s style=%s", path, store.store_id, store.style)
    return store
