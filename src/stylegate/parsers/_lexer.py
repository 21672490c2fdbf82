"""Lexical helpers for script sources: bracket matching and literal splitting.

These helpers never evaluate code.  They understand just enough of the
JavaScript/TypeScript lexical grammar (strings, template literals, comments,
regex literals) to find matching brackets and split object/array literals
into top-level entries.  Syntax validity is checked separately by
:mod:`stylegate.parsers.syntax`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from stylegate.errors import ParseError

_OPEN_TO_CLOSE: dict[str, str] = {"{": "}", "[": "]", "(": ")", "<": ">"}
_CLOSERS: frozenset[str] = frozenset({"}", "]", ")"})

_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_STRING_LITERAL_RE = re.compile(r"""^\s*(['"`])(.*?)\1\s*$""", re.DOTALL)


@dataclass(frozen=True)
class Entry:
    """A top-level entry of an object or array literal."""

    key: str | None  # None for array items and spreads
    value: str
    offset: int  # absolute offset of the entry start in the source


def line_of(source: str, offset: int) -> int:
    """Return the 1-based line number for *offset*."""
    return source.count("\n", 0, offset) + 1


def column_of(source: str, offset: int) -> int:
    """Return the 1-based column for *offset*."""
    return offset - (source.rfind("\n", 0, offset) + 1) + 1


def _skip_string(source: str, pos: int, path: str) -> int:
    """Return the index just past the string literal starting at *pos*."""
    quote = source[pos]
    i = pos + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            break
        i += 1
    msg = "unterminated string literal"
    raise ParseError(msg, path=path, line=line_of(source, pos))


def _skip_comment(source: str, pos: int) -> int:
    """Return the index just past a comment at *pos*, or *pos* if none."""
    if source.startswith("//", pos):
        end = source.find("\n", pos)
        return len(source) if end == -1 else end
    if source.startswith("/*", pos):
        end = source.find("*/", pos + 2)
        return len(source) if end == -1 else end + 2
    return pos


_REGEX_PRECEDERS: frozenset[str] = frozenset("(,=:[!&|?{};+-*%>~^")
_REGEX_KEYWORDS: frozenset[str] = frozenset(
    "return typeof case do else in of new delete void throw yield await".split()
)


def _regex_allowed(source: str, pos: int) -> bool:
    """True when a `/` at *pos* starts an expression rather than dividing."""
    i = pos - 1
    while i >= 0 and source[i].isspace():
        i -= 1
    if i < 0:
        return True
    prev = source[i]
    if prev in _REGEX_PRECEDERS:
        return True
    if prev.isalnum() or prev in "_$":
        start = i
        while start > 0 and (source[start - 1].isalnum() or source[start - 1] in "_$"):
            start -= 1
        return source[start : i + 1] in _REGEX_KEYWORDS
    return False


def _skip_regex(source: str, pos: int) -> int:
    """Return the index just past a regex literal at *pos*, or *pos* if none."""
    in_class = False
    i = pos + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "\n":
            return pos
        if in_class:
            in_class = ch != "]"
        elif ch == "[":
            in_class = True
        elif ch == "/":
            i += 1
            while i < len(source) and source[i].isalpha():
                i += 1
            return i
        i += 1
    return pos


def _skip_slash(source: str, pos: int) -> int:
    """Skip a comment or regex literal starting at *pos*; *pos* if neither."""
    after = _skip_comment(source, pos)
    if after == pos and _regex_allowed(source, pos):
        after = _skip_regex(source, pos)
    return after


def find_closing(source: str, open_pos: int, *, path: str = "") -> int:
    """Return the index of the bracket closing the one at *open_pos*.

    Raises :class:`ParseError` when the bracket is never closed or a
    mismatched closer is found first.
    """
    opener = source[open_pos]
    if opener not in ("{", "[", "("):
        msg = f"expected an opening bracket at offset {open_pos}, found {opener!r}"
        raise ParseError(msg, path=path, line=line_of(source, open_pos))

    stack: list[str] = [_OPEN_TO_CLOSE[opener]]
    i = open_pos + 1
    while i < len(source):
        ch = source[i]
        if ch in ("'", '"', "`"):
            i = _skip_string(source, i, path)
            continue
        if ch == "/":
            after = _skip_slash(source, i)
            if after != i:
                i = after
                continue
        if ch in ("{", "[", "("):
            stack.append(_OPEN_TO_CLOSE[ch])
        elif ch in _CLOSERS:
            expected = stack.pop()
            if ch != expected:
                msg = f"mismatched '{ch}' (expected '{expected}')"
                raise ParseError(msg, path=path, line=line_of(source, i))
            if not stack:
                return i
        i += 1

    msg = f"unbalanced '{opener}'"
    raise ParseError(msg, path=path, line=line_of(source, open_pos))


def find_call(source: str, callee: str, start: int = 0) -> int | None:
    """Return the offset of the ``(`` following *callee*, or None.

    Generic type arguments (``defineProps<...>(``) are skipped over.
    """
    pattern = re.compile(rf"(?<![\w$.]){re.escape(callee)}\s*(<|\()")
    match = pattern.search(source, start)
    if match is None:
        return None
    pos = match.end(1) - 1
    if source[pos] == "(":
        return pos
    # Skip a generic type argument list.
    depth = 0
    i = pos
    while i < len(source):
        if source[i] == "<":
            depth += 1
        elif source[i] == ">" and source[i - 1] != "=":
            depth -= 1
            if depth == 0:
                nxt = source.find("(", i)
                return nxt if nxt != -1 else None
        i += 1
    return None


def generic_argument(source: str, callee: str) -> tuple[str, int] | None:
    """Return the text between ``callee<`` and its matching ``>`` plus its offset."""
    match = re.search(rf"(?<![\w$.]){re.escape(callee)}\s*<", source)
    if match is None:
        return None
    start = match.end()
    depth = 1
    i = start
    while i < len(source):
        if source[i] == "<":
            depth += 1
        elif source[i] == ">" and source[i - 1] != "=":
            depth -= 1
            if depth == 0:
                return source[start:i], start
        i += 1
    return None


def split_top_level(
    body: str, base_offset: int = 0, *, path: str = "", type_literal: bool = False
) -> list[tuple[str, int]]:
    """Split *body* on commas/semicolons that are not nested in brackets.

    With *type_literal*, a newline after a complete member also separates
    entries (TypeScript type literals may omit delimiters).  Returns
    ``(text, absolute_offset)`` pairs with surrounding whitespace trimmed;
    empty pieces are dropped.
    """
    pieces: list[tuple[str, int]] = []
    depth = 0
    start = 0
    i = 0
    while i < len(body):
        ch = body[i]
        if ch in ("'", '"', "`"):
            i = _skip_string(body, i, path)
            continue
        if ch == "/":
            after = _skip_slash(body, i)
            if after != i:
                i = after
                continue
        if ch in ("{", "[", "("):
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch in (",", ";", "\n") and depth == 0:
            if ch != "\n" or (type_literal and _ends_type_member(body[start:i])):
                _append_piece(pieces, body[start:i], base_offset + start)
                start = i + 1
        i += 1
    _append_piece(pieces, body[start:], base_offset + start)
    return pieces


def _ends_type_member(text: str) -> bool:
    """Newlines separate members only in type literals without trailing commas."""
    stripped = strip_comments(text).strip()
    return bool(stripped) and ":" in stripped and not stripped.endswith((":", "=>", "|", "&"))


def _append_piece(pieces: list[tuple[str, int]], raw: str, offset: int) -> None:
    cleaned = strip_comments(raw)
    if not cleaned.strip():
        return
    lead = len(raw) - len(raw.lstrip())
    pieces.append((raw.strip(), offset + lead))


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside string literals."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in ("'", '"', "`"):
            end = text.find(ch, i + 1)
            while end != -1 and text[end - 1] == "\\":
                end = text.find(ch, end + 1)
            end = len(text) if end == -1 else end + 1
            out.append(text[i:end])
            i = end
            continue
        if ch == "/":
            after = _skip_comment(text, i)
            if after != i:
                i = after
                continue
            after = _skip_regex(text, i) if _regex_allowed(text, i) else i
            if after != i:
                out.append(text[i:after])
                i = after
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def object_entries(source: str, open_pos: int, *, path: str = "") -> list[Entry]:
    """Return the top-level entries of the object literal opening at *open_pos*.

    Handles ``key: value``, quoted keys, shorthand ``key``, method shorthand
    ``key() {}`` / ``async key() {}`` and spreads (``key=None``).
    """
    close = find_closing(source, open_pos, path=path)
    body = source[open_pos + 1 : close]
    entries: list[Entry] = []
    for text, offset in split_top_level(body, open_pos + 1, path=path):
        entries.append(Entry(key=_entry_key(text), value=_entry_value(text), offset=offset))
    return entries


def array_items(source: str, open_pos: int, *, path: str = "") -> list[Entry]:
    """Return the top-level items of the array literal opening at *open_pos*."""
    close = find_closing(source, open_pos, path=path)
    body = source[open_pos + 1 : close]
    return [
        Entry(key=None, value=text, offset=offset)
        for text, offset in split_top_level(body, open_pos + 1, path=path)
    ]


_KEY_RE = re.compile(
    r"""^(?:async\s+|get\s+|set\s+|static\s+|readonly\s+)*"""
    r"""(?:(['"])(?P<quoted>[^'"]+)\1|(?P<ident>[A-Za-z_$][\w$-]*))"""
    r"""\s*(?P<optional>\?)?\s*(?P<sep>:|\(|<|,|$)"""
)


def _entry_key(text: str) -> str | None:
    text = strip_comments(text).strip()
    if text.startswith("..."):
        return None
    match = _KEY_RE.match(text)
    if match is None:
        return None
    return match.group("quoted") or match.group("ident")


def _entry_value(text: str) -> str:
    stripped = strip_comments(text).strip()
    match = _KEY_RE.match(stripped)
    if match is None:
        return stripped
    if match.group("sep") == ":":
        return stripped[match.end() :].strip()
    return stripped


def string_value(text: str) -> str | None:
    """Return the contents of a plain string literal, or None."""
    match = _STRING_LITERAL_RE.match(text)
    if match is None or (match.group(1) == "`" and "${" in match.group(2)):
        return None
    return match.group(2)


def identifier(text: str) -> str | None:
    """Return *text* if it is a bare identifier."""
    stripped = text.strip()
    match = _IDENT_RE.fullmatch(stripped)
    return stripped if match else None


_VALUE_START_RE = re.compile(r"[^:,]*:\s*([\[{(])")


def value_offset(source: str, entry_offset: int) -> int | None:
    """Return the offset of the bracket opening the value of ``key: value``.

    Returns None when the value is not an object, array or parenthesized
    literal.
    """
    match = _VALUE_START_RE.match(source, entry_offset)
    return match.start(1) if match else None
