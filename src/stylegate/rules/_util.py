"""Small helpers shared by rule matchers."""

from __future__ import annotations

import fnmatch
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9])|[A-Z]?[a-z0-9]+|[A-Z]+")
PASCAL_CASE_RE = re.compile(r"^[A-Z][a-z0-9]*(?:[A-Z][a-z0-9]*)*$")
KEBAB_CASE_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def split_words(name: str) -> list[str]:
    """Split camel, Pascal, kebab or snake case into words."""
    return _WORD_RE.findall(name)


def pascal_case(name: str) -> str:
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(name))


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    name = path.rsplit("/", 1)[-1]
    return any(fnmatch.fnmatchcase(path, p) or fnmatch.fnmatchcase(name, p) for p in patterns)


def find_line(content: str, pattern: re.Pattern[str]) -> int | None:
    """Return the 1-based line of the first match of *pattern*, if any."""
    match = pattern.search(content)
    if match is None:
        return None
    return content.count("\n", 0, match.start()) + 1


def join_paths(paths: Iterable[str]) -> str:
    return ", ".join(paths)
