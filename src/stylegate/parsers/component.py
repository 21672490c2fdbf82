"""Single-file component parser: blocks, declared name, props and emits."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from stylegate.errors import ParseError
from stylegate.model import ComponentFacts, EmitUse, PropFact
from stylegate.parsers._lexer import (
    array_items,
    column_of,
    find_call,
    find_closing,
    generic_argument,
    identifier,
    line_of,
    object_entries,
    split_top_level,
    string_value,
    value_offset,
)
from stylegate.parsers.syntax import check_syntax, dialect_for

logger = logging.getLogger(__name__)

BLOCK_NAMES: tuple[str, ...] = ("script", "template", "style")

_BLOCK_OPEN_RE = re.compile(rf"<({'|'.join(BLOCK_NAMES)})(\s[^>]*)?>", re.IGNORECASE)
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_NESTED_TEMPLATE_RE = re.compile(r"<template(\s[^>]*)?>|</template\s*>", re.IGNORECASE)
_LANG_RE = re.compile(r"""\blang\s*=\s*["']([\w-]+)["']""")
_EMIT_BINDING_RE = re.compile(r"(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*defineEmits\b")
_EMIT_SIGNATURE_RE = re.compile(r"""\(\s*\w+\s*:\s*(['"])([^'"]+)\1""")
_TYPE_DECL_RE = r"(?:interface\s+{name}\s*(?:extends\s+[^{{]+)?\{{|type\s+{name}\s*=\s*\{{)"


@dataclass(frozen=True)
class Block:
    """A top-level block of a component file."""

    name: str
    attrs: str
    start: int  # offset of the block body
    end: int  # offset of the closing tag

    def body(self, content: str) -> str:
        return content[self.start : self.end]


def find_blocks(content: str, *, path: str = "") -> list[Block]:
    """Return the top-level script/template/style blocks in source order."""
    blocks: list[Block] = []
    pos = 0
    while True:
        match = _BLOCK_OPEN_RE.search(content, pos)
        if match is None:
            break
        enclosing = _enclosing_comment(content, pos, match.start())
        if enclosing is not None:
            pos = enclosing
            continue
        name = match.group(1).lower()
        attrs = (match.group(2) or "").strip()
        body_start = match.end()
        if attrs.endswith("/"):
            blocks.append(Block(name=name, attrs=attrs, start=body_start, end=body_start))
            pos = body_start
            continue
        end = _find_block_end(content, name, body_start)
        if end is None:
            msg = f"unterminated <{name}> block"
            raise ParseError(msg, path=path, line=line_of(content, match.start()))
        blocks.append(Block(name=name, attrs=attrs, start=body_start, end=end))
        pos = content.index(">", end) + 1
    return blocks


def _enclosing_comment(content: str, pos: int, offset: int) -> int | None:
    """Return the end of a top-level HTML comment containing *offset*, if any."""
    for comment in _HTML_COMMENT_RE.finditer(content, pos):
        if comment.start() > offset:
            break
        if offset < comment.end():
            return comment.end()
    return None


def _find_block_end(content: str, name: str, body_start: int) -> int | None:
    """Return the offset of the closing tag for the block starting at *body_start*."""
    if name != "template":
        match = re.compile(rf"</{name}\s*>", re.IGNORECASE).search(content, body_start)
        return match.start() if match else None
    depth = 1
    for match in _NESTED_TEMPLATE_RE.finditer(content, body_start):
        if match.group(0).startswith("</"):
            depth -= 1
            if depth == 0:
                return match.start()
        elif not match.group(0).rstrip(">").endswith("/"):
            depth += 1
    return None


def _derive_name(path: str) -> str:
    filename = path.rsplit("/", 1)[-1]
    return filename.split(".", 1)[0]


# ---------------------------------------------------------------------------
# Props
# ---------------------------------------------------------------------------


def _props_from_type_literal(
    content: str, body: str, body_offset: int, path: str
) -> list[PropFact]:
    props: list[PropFact] = []
    for text, offset in split_top_level(body, body_offset, path=path, type_literal=True):
        key, sep, type_text = text.partition(":")
        name = key.strip().rstrip("?").strip().strip("'\"")
        if not sep or identifier(name.replace("-", "_")) is None:
            continue
        props.append(
            PropFact(name=name, type=type_text.strip() or None, line=line_of(content, offset))
        )
    return props


def _resolve_type_body(script: str, type_name: str) -> int | None:
    """Return the offset of ``{`` opening a local interface/type alias body."""
    pattern = re.compile(_TYPE_DECL_RE.format(name=re.escape(type_name)))
    match = pattern.search(script)
    return match.end() - 1 if match else None


def _runtime_prop_type(value: str) -> str | None:
    value = value.strip()
    if value.startswith("["):
        inner = value.strip("[] \n")
        return inner or None
    if value.startswith("{"):
        match = re.search(r"\btype\s*:\s*([^,}\n]+)", value)
        return match.group(1).strip() if match else None
    if value in ("null", "undefined", ""):
        return None
    return value


def _props_from_runtime(content: str, arg_pos: int, path: str) -> list[PropFact]:
    """Props declared as an object literal or string array at *arg_pos*."""
    opener = content[arg_pos]
    props: list[PropFact] = []
    if opener == "[":
        for item in array_items(content, arg_pos, path=path):
            name = string_value(item.value)
            if name:
                props.append(PropFact(name=name, type=None, line=line_of(content, item.offset)))
    elif opener == "{":
        for entry in object_entries(content, arg_pos, path=path):
            if entry.key is None:
                continue
            props.append(
                PropFact(
                    name=entry.key,
                    type=_runtime_prop_type(entry.value),
                    line=line_of(content, entry.offset),
                )
            )
    return props


def _extract_define_props(content: str, block: Block, path: str) -> list[PropFact] | None:
    script = block.body(content)
    call = find_call(script, "defineProps")
    if call is None:
        return None

    generic = generic_argument(script, "defineProps")
    if generic is not None:
        type_arg, type_offset = generic
        type_arg_stripped = type_arg.strip()
        if type_arg_stripped.startswith("{"):
            open_pos = script.index("{", type_offset)
            close = find_closing(script, open_pos, path=path)
            return _props_from_type_literal(
                content, script[open_pos + 1 : close], block.start + open_pos + 1, path
            )
        type_name = identifier(type_arg_stripped)
        if type_name is not None:
            open_pos = _resolve_type_body(script, type_name)
            if open_pos is not None:
                close = find_closing(script, open_pos, path=path)
                return _props_from_type_literal(
                    content, script[open_pos + 1 : close], block.start + open_pos + 1, path
                )
        logger.debug("Props type %r not resolvable in %s", type_arg_stripped, path)
        return []

    abs_call = block.start + call
    close = find_closing(content, abs_call, path=path)
    inner = content[abs_call + 1 : close]
    stripped = inner.lstrip()
    if not stripped:
        return []
    arg_pos = abs_call + 1 + (len(inner) - len(stripped))
    return _props_from_runtime(content, arg_pos, path)


# ---------------------------------------------------------------------------
# Emits
# ---------------------------------------------------------------------------


def _extract_define_emits(content: str, block: Block, path: str) -> list[str] | None:
    script = block.body(content)
    call = find_call(script, "defineEmits")
    if call is None:
        return None

    generic = generic_argument(script, "defineEmits")
    if generic is not None:
        type_arg = generic[0]
        names = [m.group(2) for m in _EMIT_SIGNATURE_RE.finditer(type_arg)]
        if names:
            return names
        # Named-tuple form: { change: [id: number]; update: [] }
        body = type_arg.strip()
        if body.startswith("{") and body.endswith("}"):
            pieces = split_top_level(body[1:-1], path=path, type_literal=True)
            return [t.partition(":")[0].strip().strip("'\"") for t, _ in pieces]
        return []

    abs_call = block.start + call
    close = find_closing(content, abs_call, path=path)
    inner = content[abs_call + 1 : close]
    stripped = inner.lstrip()
    if not stripped:
        return []
    arg_pos = abs_call + 1 + (len(inner) - len(stripped))
    return _emit_names_at(content, arg_pos, path)


def _emit_names_at(content: str, arg_pos: int, path: str) -> list[str]:
    opener = content[arg_pos]
    if opener == "[":
        return [
            name
            for name in (string_value(i.value) for i in array_items(content, arg_pos, path=path))
            if name
        ]
    if opener == "{":
        return [e.key for e in object_entries(content, arg_pos, path=path) if e.key]
    return []


def _used_emits(content: str, blocks: list[Block], bindings: set[str]) -> list[EmitUse]:
    names = "|".join(sorted(re.escape(b) for b in bindings | {"$emit"}))
    pattern = re.compile(rf"""(?<![\w$])(?:{names})\(\s*(['"])([^'"]+)\1""")
    uses: list[EmitUse] = []
    for block in blocks:
        if block.name not in ("script", "template"):
            continue
        for match in pattern.finditer(content, block.start, block.end):
            offset = match.start()
            uses.append(
                EmitUse(
                    name=match.group(2),
                    line=line_of(content, offset),
                    column=column_of(content, offset),
                )
            )
    return uses


# ---------------------------------------------------------------------------
# Options API
# ---------------------------------------------------------------------------


def _options_object(script: str) -> int | None:
    """Return the offset of ``{`` for ``export default {`` / ``defineComponent({``."""
    match = re.search(r"export\s+default\s+(?:defineComponent\s*\(\s*)?\{", script)
    return match.end() - 1 if match else None


def _declared_name_in(content: str, pos: int, path: str) -> str | None:
    for entry in object_entries(content, pos, path=path):
        if entry.key == "name":
            return string_value(entry.value)
    return None


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_component(path: str, content: str) -> ComponentFacts:
    """Normalize a single-file component into :class:`ComponentFacts`.

    Raises :class:`ParseError` for unterminated blocks or invalid script
    syntax.  An empty file yields facts with no blocks.
    """
    if not content.strip():
        return ComponentFacts(name=_derive_name(path))

    blocks = find_blocks(content, path=path)
    scripts = [b for b in blocks if b.name == "script"]
    styles = [b for b in blocks if b.name == "style"]

    for block in scripts:
        lang = _LANG_RE.search(block.attrs)
        check_syntax(
            block.body(content),
            path=path,
            dialect=dialect_for(lang.group(1) if lang else None),
            first_line=line_of(content, block.start),
        )

    name: str | None = None
    props: list[PropFact] = []
    emits: list[str] = []
    emits_declared = False
    emit_bindings: set[str] = set()

    for block in scripts:
        script = block.body(content)
        emit_bindings.update(_EMIT_BINDING_RE.findall(script))

        declared = _extract_define_props(content, block, path)
        if declared is not None:
            props.extend(declared)
        declared_emits = _extract_define_emits(content, block, path)
        if declared_emits is not None:
            emits.extend(declared_emits)
            emits_declared = True

        options_call = find_call(script, "defineOptions")
        if options_call is not None:
            arg = script.find("{", options_call)
            if arg != -1:
                name = _declared_name_in(content, block.start + arg, path) or name

        options_pos = _options_object(script)
        if options_pos is not None:
            abs_pos = block.start + options_pos
            for entry in object_entries(content, abs_pos, path=path):
                value_pos = value_offset(content, entry.offset)
                if entry.key == "name":
                    name = string_value(entry.value) or name
                elif entry.key == "props" and value_pos is not None:
                    props.extend(_props_from_runtime(content, value_pos, path))
                elif entry.key == "emits" and value_pos is not None:
                    emits.extend(_emit_names_at(content, value_pos, path))
                    emits_declared = True

    setup_attr = any(re.search(r"(^|\s)setup(\s|$|=)", b.attrs) for b in scripts)
    lang_match = next((m for m in (_LANG_RE.search(b.attrs) for b in scripts) if m), None)
    scoped = bool(styles) and all(
        re.search(r"(^|\s)(scoped|module)(\s|$|=)", b.attrs) for b in styles
    )

    facts = ComponentFacts(
        name=name or _derive_name(path),
        name_declared=name is not None,
        block_order=tuple(b.name for b in blocks),
        script_setup=setup_attr,
        script_lang=lang_match.group(1) if lang_match else None,
        scoped_style=scoped,
        props=tuple(props),
        declared_emits=tuple(dict.fromkeys(emits)),
        emits_declared=emits_declared,
        used_emits=tuple(_used_emits(content, blocks, emit_bindings | {"emit"})),
    )
    logger.debug("Parsed component %s: blocks=%s", path, facts.block_order)
    return facts
