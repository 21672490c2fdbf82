"""Tool configuration parser: formatter, linter, build-tool and CSS-framework configs."""

from __future__ import annotations

import logging
import re
from typing import Any

import yaml

from stylegate.errors import ParseError
from stylegate.model import ToolConfigFacts
from stylegate.parsers._lexer import object_entries, string_value
from stylegate.parsers.syntax import check_syntax

logger = logging.getLogger(__name__)

FORMATTER = "formatter"
LINTER = "linter"
BUILD_TOOL = "build-tool"
CSS_FRAMEWORK = "css-framework"

_SCRIPT_SUFFIXES: tuple[str, ...] = (".js", ".cjs", ".mjs", ".ts", ".cts", ".mts")


def _variants(stems: tuple[str, ...], suffixes: tuple[str, ...]) -> list[str]:
    return [stem + suffix for stem in stems for suffix in suffixes]


# file name -> (tool, role)
TOOL_FILES: dict[str, tuple[str, str]] = {
    **{
        name: ("prettier", FORMATTER)
        for name in [
            ".prettierrc",
            *_variants((".prettierrc",), (".json", ".json5", ".yml", ".yaml", *_SCRIPT_SUFFIXES)),
            *_variants(("prettier.config",), _SCRIPT_SUFFIXES),
        ]
    },
    **{
        name: ("eslint", LINTER)
        for name in [
            ".eslintrc",
            *_variants((".eslintrc",), (".json", ".yml", ".yaml", ".js", ".cjs")),
            *_variants(("eslint.config",), _SCRIPT_SUFFIXES),
        ]
    },
    **{
        name: ("stylelint", LINTER)
        for name in [
            ".stylelintrc",
            *_variants((".stylelintrc",), (".json", ".yml", ".yaml", ".js", ".cjs")),
            *_variants(("stylelint.config",), _SCRIPT_SUFFIXES),
        ]
    },
    **{name: ("vite", BUILD_TOOL) for name in _variants(("vite.config",), _SCRIPT_SUFFIXES)},
    **{name: ("webpack", BUILD_TOOL) for name in _variants(("webpack.config",), _SCRIPT_SUFFIXES)},
    **{name: ("vue-cli", BUILD_TOOL) for name in _variants(("vue.config",), _SCRIPT_SUFFIXES)},
    **{
        name: ("tailwind", CSS_FRAMEWORK)
        for name in _variants(("tailwind.config",), _SCRIPT_SUFFIXES)
    },
    **{
        name: ("unocss", CSS_FRAMEWORK)
        for name in _variants(("uno.config", "unocss.config"), _SCRIPT_SUFFIXES)
    },
}

_CONFIG_OBJECT_RE = re.compile(
    r"(?:export\s+default|module\.exports\s*=)\s*(?:defineConfig\s*\(\s*)?(?:\[\s*)?\{"
)
_NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")


def tool_for(filename: str) -> tuple[str, str] | None:
    """Return ``(tool, role)`` for a recognized config file name."""
    return TOOL_FILES.get(filename)


def _flatten(data: dict[str, Any]) -> tuple[tuple[str, str], ...]:
    """Flatten a mapping one level deep into ``(key, value)`` string pairs."""
    settings: list[tuple[str, str]] = []
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                settings.append((f"{key}.{sub_key}", _scalar(sub_value)))
        else:
            settings.append((str(key), _scalar(value)))
    return tuple(sorted(settings))


def _scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(_scalar(v) for v in value)
    if isinstance(value, dict):
        return "*"
    return "" if value is None else str(value)


def _script_settings(path: str, content: str) -> tuple[tuple[str, str], ...]:
    check_syntax(content, path=path)
    match = _CONFIG_OBJECT_RE.search(content)
    if match is None:
        return ()
    settings: list[tuple[str, str]] = []
    for entry in object_entries(content, match.end() - 1, path=path):
        if entry.key is None:
            continue
        value = entry.value
        literal = string_value(value)
        if literal is not None:
            settings.append((entry.key, literal))
        elif value in ("true", "false") or _NUMBER_RE.match(value):
            settings.append((entry.key, value))
        else:
            settings.append((entry.key, "*"))
    return tuple(sorted(settings))


def parse_tool_config(path: str, content: str) -> ToolConfigFacts:
    """Normalize a tool configuration file into :class:`ToolConfigFacts`.

    JSON and YAML bodies are loaded with PyYAML; JS/TS config modules have
    their exported object's primitive settings extracted without execution.
    """
    filename = path.rsplit("/", 1)[-1]
    identity = tool_for(filename)
    if identity is None:
        msg = f"unrecognized tool configuration file '{filename}'"
        raise ParseError(msg, path=path)
    tool, role = identity

    if not content.strip():
        return ToolConfigFacts(tool=tool, role=role)

    if filename.endswith(_SCRIPT_SUFFIXES):
        settings = _script_settings(path, content)
    else:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            line = mark.line + 1 if mark is not None else None
            msg = f"invalid {tool} configuration: {getattr(exc, 'problem', exc)}"
            raise ParseError(msg, path=path, line=line) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = f"{tool} configuration must be a mapping"
            raise ParseError(msg, path=path, line=1)
        settings = _flatten(data)

    logger.debug("Parsed %s config %s (%d settings)", tool, path, len(settings))
    return ToolConfigFacts(tool=tool, role=role, settings=settings)
