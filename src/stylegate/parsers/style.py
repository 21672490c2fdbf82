"""Stylesheet parser: rule count and ``!important`` usage."""

from __future__ import annotations

import re

from stylegate.errors import ParseError
from stylegate.model import StyleFacts
from stylegate.parsers._lexer import column_of, line_of

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"(?<![:\w])//[^\n]*")
_IMPORTANT_RE = re.compile(r"!\s*important\b", re.IGNORECASE)


def _blank(match: re.Match[str]) -> str:
    """Replace a comment with whitespace, keeping line breaks."""
    return re.sub(r"[^\n]", " ", match.group(0))


def parse_style(path: str, content: str) -> StyleFacts:
    """Normalize a CSS/SCSS/Less stylesheet into :class:`StyleFacts`.

    Comments are blanked out (preserving offsets) before counting; unbalanced
    braces or an unterminated comment raise :class:`ParseError`.
    """
    if not content.strip():
        return StyleFacts()

    unterminated = content.rfind("/*")
    if unterminated != -1 and content.find("*/", unterminated) == -1:
        msg = "unterminated comment"
        raise ParseError(msg, path=path, line=line_of(content, unterminated))

    text = _COMMENT_RE.sub(_blank, content)
    if not path.endswith(".css"):
        text = _LINE_COMMENT_RE.sub(_blank, text)

    depth = 0
    rules = 0
    for offset, ch in enumerate(text):
        if ch == "{":
            depth += 1
            rules += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                msg = "unexpected '}'"
                raise ParseError(msg, path=path, line=line_of(text, offset))
    if depth != 0:
        msg = "unbalanced '{'"
        raise ParseError(msg, path=path, line=line_of(text, text.rfind("{")))

    important = tuple(
        (line_of(text, m.start()), column_of(text, m.start())) for m in _IMPORTANT_RE.finditer(text)
    )
    return StyleFacts(rule_count=rules, important=important)
