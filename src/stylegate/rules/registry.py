"""Rule definitions and the registry that owns the set of valid rule ids."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from stylegate.errors import RuleConflictError

if TYPE_CHECKING:
    from stylegate.model import ProjectModel, ProjectNode

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

Severity = Literal["error", "warning", "info"]

SEVERITIES: tuple[str, ...] = ("error", "warning", "info")

DOMAINS: tuple[str, ...] = (
    "structure",
    "naming",
    "component-shape",
    "store-shape",
    "router-shape",
    "formatting",
)

# Synthetic findings emitted by the engine itself; fixed severities.
UNPARSABLE_FILE = "unparsable-file"
RULE_CRASHED = "rule-crashed"
SYMLINK_CYCLE = "symlink-cycle"
INVALID_CONFIG = "invalid-config"

RESERVED_RULE_IDS: dict[str, str] = {
    UNPARSABLE_FILE: "error",
    RULE_CRASHED: "error",
    SYMLINK_CYCLE: "warning",
    INVALID_CONFIG: "error",
}

RESERVED_MESSAGES: dict[str, str] = {
    UNPARSABLE_FILE: "File could not be parsed: {reason}",
    RULE_CRASHED: "Rule '{rule}' crashed: {error}",
    SYMLINK_CYCLE: "Symbolic link cycle back to '{target}' not followed",
    INVALID_CONFIG: "{reason}",
}

# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawFinding:
    """A matcher hit before severity and suppression resolution."""

    rule_id: str
    path: str
    line: int | None = None
    column: int | None = None
    bindings: Mapping[str, Any] = field(default_factory=dict)
    related: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleContext:
    """What a matcher sees besides the model: its id and effective options."""

    rule_id: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def finding(
        self,
        path: str,
        *,
        line: int | None = None,
        column: int | None = None,
        related: Iterable[str] = (),
        **bindings: Any,
    ) -> RawFinding:
        return RawFinding(
            rule_id=self.rule_id,
            path=path,
            line=line,
            column=column,
            bindings=bindings,
            related=tuple(related),
        )


# ---------------------------------------------------------------------------
# Rule variants
# ---------------------------------------------------------------------------

NodeCheck = Callable[["ProjectNode", RuleContext], Iterable[RawFinding]]
ProjectCheck = Callable[["ProjectModel", RuleContext], Iterable[RawFinding]]


@dataclass(frozen=True)
class NodeRule:
    """A matcher over one parsed file at a time."""

    id: str
    domain: str
    default_severity: Severity
    message: str
    check: NodeCheck = field(compare=False, repr=False)
    kinds: frozenset[str] = frozenset()
    description: str = ""
    enabled_by_default: bool = True
    options: Mapping[str, Any] = field(default_factory=dict)
    scope: Literal["node"] = "node"


@dataclass(frozen=True)
class ProjectRule:
    """A matcher over the complete Project Model; runs after every node rule."""

    id: str
    domain: str
    default_severity: Severity
    message: str
    check: ProjectCheck = field(compare=False, repr=False)
    description: str = ""
    enabled_by_default: bool = True
    options: Mapping[str, Any] = field(default_factory=dict)
    scope: Literal["project"] = "project"


Rule = NodeRule | ProjectRule


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RuleRegistry:
    """Mapping from rule id to Rule; the single source of valid rule ids."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        """Add *rule*; raise :class:`RuleConflictError` on a duplicate or reserved id."""
        if rule.id in RESERVED_RULE_IDS:
            msg = f"Rule id '{rule.id}' is reserved for engine findings"
            raise RuleConflictError(msg)
        if rule.id in self._rules:
            msg = f"Duplicate rule id '{rule.id}'"
            raise RuleConflictError(msg)
        if rule.domain not in DOMAINS:
            msg = f"Rule '{rule.id}' has unknown domain '{rule.domain}'"
            raise RuleConflictError(msg)
        if rule.default_severity not in SEVERITIES:
            msg = f"Rule '{rule.id}' has invalid default severity '{rule.default_severity}'"
            raise RuleConflictError(msg)
        self._rules[rule.id] = rule
        return rule

    def node_rule(
        self,
        rule_id: str,
        *,
        domain: str,
        severity: Severity,
        message: str,
        kinds: Iterable[str],
        description: str = "",
        enabled: bool = True,
        options: Mapping[str, Any] | None = None,
    ) -> Callable[[NodeCheck], NodeCheck]:
        """Decorator registering a node-local matcher."""

        def decorator(func: NodeCheck) -> NodeCheck:
            self.register(
                NodeRule(
                    id=rule_id,
                    domain=domain,
                    default_severity=severity,
                    message=message,
                    check=func,
                    kinds=frozenset(kinds),
                    description=description or (func.__doc__ or "").strip(),
                    enabled_by_default=enabled,
                    options=dict(options or {}),
                )
            )
            return func

        return decorator

    def project_rule(
        self,
        rule_id: str,
        *,
        domain: str,
        severity: Severity,
        message: str,
        description: str = "",
        enabled: bool = True,
        options: Mapping[str, Any] | None = None,
    ) -> Callable[[ProjectCheck], ProjectCheck]:
        """Decorator registering a project-wide matcher."""

        def decorator(func: ProjectCheck) -> ProjectCheck:
            self.register(
                ProjectRule(
                    id=rule_id,
                    domain=domain,
                    default_severity=severity,
                    message=message,
                    check=func,
                    description=description or (func.__doc__ or "").strip(),
                    enabled_by_default=enabled,
                    options=dict(options or {}),
                )
            )
            return func

        return decorator

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        for rule_id in sorted(self._rules):
            yield self._rules[rule_id]

    def ids(self) -> list[str]:
        return sorted(self._rules)

    def by_domain(self, domain: str) -> list[Rule]:
        return [rule for rule in self if rule.domain == domain]

    def domains(self) -> list[str]:
        """Domains that have at least one registered rule, in catalogue order."""
        present = {rule.domain for rule in self._rules.values()}
        return [d for d in DOMAINS if d in present]
