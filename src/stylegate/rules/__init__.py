"""Rule definitions, the registry and the built-in catalogue."""

from stylegate.rules.catalogue import build_default_registry
from stylegate.rules.registry import (
    DOMAINS,
    INVALID_CONFIG,
    RESERVED_RULE_IDS,
    RULE_CRASHED,
    SEVERITIES,
    SYMLINK_CYCLE,
    UNPARSABLE_FILE,
    NodeRule,
    ProjectRule,
    RawFinding,
    Rule,
    RuleContext,
    RuleRegistry,
)

__all__ = [
    "DOMAINS",
    "INVALID_CONFIG",
    "RESERVED_RULE_IDS",
    "RULE_CRASHED",
    "SEVERITIES",
    "SYMLINK_CYCLE",
    "UNPARSABLE_FILE",
    "NodeRule",
    "ProjectRule",
    "RawFinding",
    "Rule",
    "RuleContext",
    "RuleRegistry",
    "build_default_registry",
]

