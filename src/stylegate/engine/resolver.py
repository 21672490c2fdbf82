"""Severity and suppression resolution: raw findings to final Violations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stylegate.rules.registry import RESERVED_MESSAGES, RESERVED_RULE_IDS

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from stylegate.config.loader import Configuration
    from stylegate.rules.registry import RawFinding, RuleRegistry
    from stylegate.scanning.suppressions import SuppressionSet


@dataclass(frozen=True)
class Violation:
    """A finding after resolution; identity is (rule_id, path, line, column)."""

    rule_id: str
    path: str
    line: int | None
    column: int | None
    severity: str  # "error" | "warning" | "info"
    message: str
    related: tuple[str, ...] = field(default=(), compare=False)

    @property
    def identity(self) -> tuple[str, str, int | None, int | None]:
        return (self.rule_id, self.path, self.line, self.column)


@dataclass(frozen=True)
class Resolution:
    violations: tuple[Violation, ...] = ()
    suppressed: tuple[Violation, ...] = ()


class _Bindings(dict[str, Any]):
    """Leave unknown placeholders in place instead of raising."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_message(template: str, bindings: Mapping[str, Any]) -> str:
    try:
        return template.format_map(_Bindings(bindings))
    except (ValueError, IndexError, AttributeError):
        # malformed template; fall back to the raw text
        return template


def _template_for(rule_id: str, registry: RuleRegistry) -> str:
    if rule_id in RESERVED_MESSAGES:
        return RESERVED_MESSAGES[rule_id]
    rule = registry.get(rule_id)
    return rule.message if rule is not None else rule_id


def resolve(
    findings: Iterable[RawFinding],
    configuration: Configuration,
    suppressions: Mapping[str, SuppressionSet],
    registry: RuleRegistry,
) -> Resolution:
    """Apply configured severity, inline lowering and silencing to *findings*.

    Inline markers are looked up only in the finding's own ``path``; they can
    lower or silence a severity, never raise it.  Reserved engine findings
    ignore markers.  Pure: the same inputs always give the same
    :class:`Resolution`.
    """
    violations: list[Violation] = []
    suppressed: list[Violation] = []
    for finding in findings:
        severity = configuration.severity_of(finding.rule_id)
        if severity == "off":
            continue
        markers = None if finding.rule_id in RESERVED_RULE_IDS else suppressions.get(finding.path)
        silenced = False
        if markers is not None:
            severity = markers.lowered_severity(finding.rule_id, severity)
            silenced = severity == "off" or markers.is_suppressed(finding.rule_id, finding.line)
        violation = Violation(
            rule_id=finding.rule_id,
            path=finding.path,
            line=finding.line,
            column=finding.column,
            severity=severity if severity != "off" else configuration.severity_of(finding.rule_id),
            message=render_message(_template_for(finding.rule_id, registry), finding.bindings),
            related=finding.related,
        )
        (suppressed if silenced else violations).append(violation)
    return Resolution(violations=tuple(violations), suppressed=tuple(suppressed))
