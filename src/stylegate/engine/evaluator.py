"""Rule evaluator: node-local rules in parallel, then project-wide rules."""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stylegate.model import PARSED_KINDS
from stylegate.rules.registry import (
    INVALID_CONFIG,
    RULE_CRASHED,
    SYMLINK_CYCLE,
    UNPARSABLE_FILE,
    NodeRule,
    ProjectRule,
    RawFinding,
    RuleContext,
)

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence

    from stylegate.config.loader import Configuration
    from stylegate.model import ProjectModel, ProjectNode
    from stylegate.rules.registry import Rule, RuleRegistry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class EvaluationResult:
    """Raw findings plus bookkeeping for one evaluation pass."""

    findings: list[RawFinding] = field(default_factory=list)
    executions: Counter[str] = field(default_factory=Counter)
    rules_run: int = 0
    nodes_evaluated: int = 0
    cancelled: bool = False


@dataclass
class _Buffer:
    """Per-task findings buffer; merged once at the barrier."""

    findings: list[RawFinding] = field(default_factory=list)
    executions: Counter[str] = field(default_factory=Counter)


# ---------------------------------------------------------------------------
# Matcher execution
# ---------------------------------------------------------------------------


def _crash(rule: Rule, path: str, exc: Exception) -> RawFinding:
    logger.warning("Rule %s crashed on %s: %s", rule.id, path, exc, exc_info=True)
    return RawFinding(
        rule_id=RULE_CRASHED,
        path=path,
        bindings={"rule": rule.id, "error": f"{type(exc).__name__}: {exc}"},
    )


def _run_node_rules(
    node: ProjectNode,
    rules: Sequence[tuple[NodeRule, RuleContext]],
    cancel: threading.Event | None,
) -> _Buffer:
    buffer = _Buffer()
    for rule, ctx in rules:
        if cancel is not None and cancel.is_set():
            break
        if node.kind not in rule.kinds:
            continue
        buffer.executions[rule.id] += 1
        try:
            buffer.findings.extend(rule.check(node, ctx))
        except Exception as exc:  # matcher faults are isolated per rule
            buffer.findings.append(_crash(rule, node.path, exc))
    return buffer


def _run_project_rule(model: ProjectModel, rule: ProjectRule, ctx: RuleContext) -> _Buffer:
    buffer = _Buffer()
    buffer.executions[rule.id] += 1
    try:
        buffer.findings.extend(rule.check(model, ctx))
    except Exception as exc:  # matcher faults are isolated per rule
        buffer.findings.append(_crash(rule, ".", exc))
    return buffer


# ---------------------------------------------------------------------------
# Engine findings
# ---------------------------------------------------------------------------


def engine_findings(configuration: Configuration, model: ProjectModel) -> list[RawFinding]:
    """Synthetic findings for configuration errors, unparsable files and symlink cycles."""
    findings: list[RawFinding] = []
    for err in configuration.errors:
        if err.source and not err.source.startswith("<"):
            finding = RawFinding(
                INVALID_CONFIG, err.source, line=err.line, bindings={"reason": err.message}
            )
        else:
            finding = RawFinding(INVALID_CONFIG, ".", bindings={"reason": str(err)})
        findings.append(finding)
    for parse_error in model.parse_errors:
        findings.append(
            RawFinding(
                UNPARSABLE_FILE,
                parse_error.path,
                line=parse_error.line,
                column=parse_error.column,
                bindings={"reason": parse_error.message},
            )
        )
    for cycle in model.cycles:
        findings.append(RawFinding(SYMLINK_CYCLE, cycle.path, bindings={"target": cycle.target}))
    return findings


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def evaluate(
    registry: RuleRegistry,
    configuration: Configuration,
    model: ProjectModel,
    *,
    jobs: int | None = None,
    cancel: threading.Event | None = None,
) -> EvaluationResult:
    """Run every enabled rule against *model*.

    Node-local rules run first, one task per source leaf on a thread pool;
    each task fills its own buffer.  Project-wide rules start only after
    every node task has finished.  Disabled rules are never executed, and a
    matcher that raises becomes a ``rule-crashed`` finding.
    """
    result = EvaluationResult(findings=engine_findings(configuration, model))
    enabled = configuration.enabled_rules(registry)
    node_rules = [
        (rule, RuleContext(rule.id, configuration.options_for(rule.id)))
        for rule in enabled
        if isinstance(rule, NodeRule)
    ]
    project_rules = [
        (rule, RuleContext(rule.id, configuration.options_for(rule.id)))
        for rule in enabled
        if isinstance(rule, ProjectRule)
    ]
    result.rules_run = len(node_rules) + len(project_rules)

    # Phase 1: node-local rules.
    # Oversized leaves carry no unit but still meet path-based rules.
    unparsable = {error.path for error in model.parse_errors}
    targets = [
        node
        for node in model.files()
        if node.kind in PARSED_KINDS and node.path not in unparsable
    ]
    buffers: list[_Buffer] = []
    if node_rules and targets:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            futures = [pool.submit(_run_node_rules, node, node_rules, cancel) for node in targets]
            buffers = [future.result() for future in futures]
    result.nodes_evaluated = len(targets)

    # Barrier: merge node-local buffers before any project-wide rule runs.
    for buffer in buffers:
        result.findings.extend(buffer.findings)
        result.executions.update(buffer.executions)

    # Phase 2: project-wide rules.
    for rule, ctx in project_rules:
        if cancel is not None and cancel.is_set():
            break
        buffer = _run_project_rule(model, rule, ctx)
        result.findings.extend(buffer.findings)
        result.executions.update(buffer.executions)

    if cancel is not None and cancel.is_set():
        result.cancelled = True
        logger.info(
            "Evaluation cancelled after %d rule executions", sum(result.executions.values())
        )

    logger.debug(
        "Evaluated %d rules over %d nodes: %d findings",
        result.rules_run,
        result.nodes_evaluated,
        len(result.findings),
    )
    return result
