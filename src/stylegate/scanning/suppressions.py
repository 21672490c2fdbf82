"""Inline suppression markers: ``stylegate-disable-*`` and ``stylegate-severity`` comments."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SEVERITY_RANK: dict[str, int] = {"off": 0, "info": 1, "warning": 2, "error": 3}

_ID_LIST = r"([a-z0-9][a-z0-9-]*(?:\s*,\s*[a-z0-9][a-z0-9-]*)*)"
_DISABLE_RE = re.compile(r"stylegate-disable-(line|next-line|file)\s+" + _ID_LIST)
_SEVERITY_RE = re.compile(r"stylegate-severity\s+([a-z0-9][a-z0-9-]*)\s*=\s*([a-z]+)")


@dataclass(frozen=True)
class SuppressionSet:
    """Suppression markers declared inside one file.

    ``lines`` maps a rule id to the line numbers it is silenced on;
    ``file_wide`` rule ids are silenced everywhere in the file, including
    findings that carry no line.  ``severities`` holds file-scoped severity
    requests, which the resolver only honours when they lower severity.
    """

    lines: dict[str, frozenset[int]] = field(default_factory=dict)
    file_wide: frozenset[str] = frozenset()
    severities: dict[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.lines or self.file_wide or self.severities)

    def is_suppressed(self, rule_id: str, line: int | None) -> bool:
        if rule_id in self.file_wide:
            return True
        if line is None:
            return False
        return line in self.lines.get(rule_id, frozenset())

    def lowered_severity(self, rule_id: str, severity: str) -> str:
        """Return *severity* lowered by a ``stylegate-severity`` marker, never raised."""
        requested = self.severities.get(rule_id)
        if requested is None:
            return severity
        if SEVERITY_RANK[requested] > SEVERITY_RANK[severity]:
            logger.info(
                "Ignoring inline severity %s=%s: markers cannot raise severity above %s",
                rule_id,
                requested,
                severity,
            )
            return severity
        return requested


def _split_ids(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def extract_suppressions(path: str, content: str) -> SuppressionSet:
    """Collect every suppression marker in *content*.

    Markers are recognised inside any comment syntax since only the marker
    text itself is matched.  Unknown severity levels are logged and skipped.
    """
    if "stylegate-" not in content:
        return SuppressionSet()

    lines: dict[str, set[int]] = {}
    file_wide: set[str] = set()
    severities: dict[str, str] = {}

    for lineno, text in enumerate(content.splitlines(), start=1):
        if "stylegate-" not in text:
            continue
        for match in _DISABLE_RE.finditer(text):
            scope, raw_ids = match.groups()
            for rule_id in _split_ids(raw_ids):
                if scope == "file":
                    file_wide.add(rule_id)
                else:
                    target = lineno if scope == "line" else lineno + 1
                    lines.setdefault(rule_id, set()).add(target)
        for match in _SEVERITY_RE.finditer(text):
            rule_id, level = match.groups()
            if level == "warn":
                level = "warning"
            if level not in SEVERITY_RANK:
                logger.warning("%s:%d: unknown severity '%s' in inline marker", path, lineno, level)
                continue
            severities[rule_id] = level

    return SuppressionSet(
        lines={rule_id: frozenset(targets) for rule_id, targets in lines.items()},
        file_wide=frozenset(file_wide),
        severities=severities,
    )
