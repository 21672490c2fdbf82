"""Script/logic module parser: exports and imports."""

from __future__ import annotations

import re

from stylegate.model import ScriptFacts
from stylegate.parsers.syntax import check_syntax

_EXPORT_DECL_RE = re.compile(
    r"^\s*export\s+(?:async\s+)?(?:const|let|var|function\*?|class|interface|type|enum)\s+"
    r"([A-Za-z_$][\w$]*)",
    re.MULTILINE,
)
_EXPORT_LIST_RE = re.compile(r"^\s*export\s*\{([^}]*)\}", re.MULTILINE)
_EXPORT_DEFAULT_RE = re.compile(r"^\s*export\s+default\b", re.MULTILINE)
_IMPORT_FROM_RE = re.compile(r"""^\s*import\s[^'"]*?from\s*['"]([^'"]+)['"]""", re.MULTILINE)
_IMPORT_BARE_RE = re.compile(r"""^\s*import\s*['"]([^'"]+)['"]""", re.MULTILINE)


def parse_script(path: str, content: str) -> ScriptFacts:
    """Normalize a plain JS/TS module into :class:`ScriptFacts`."""
    if not content.strip():
        return ScriptFacts()

    check_syntax(content, path=path)

    exports = list(_EXPORT_DECL_RE.findall(content))
    for match in _EXPORT_LIST_RE.finditer(content):
        for spec in match.group(1).split(","):
            spec = spec.strip()
            if not spec:
                continue
            # "a as b" exports b
            exports.append(spec.split(" as ")[-1].strip())

    imports = _IMPORT_FROM_RE.findall(content) + _IMPORT_BARE_RE.findall(content)
    return ScriptFacts(
        named_exports=tuple(dict.fromkeys(exports)),
        default_export=bool(_EXPORT_DEFAULT_RE.search(content)),
        imports=tuple(dict.fromkeys(imports)),
    )
