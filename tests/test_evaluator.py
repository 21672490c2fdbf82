"""Tests for stylegate.engine.evaluator — rule execution and isolation."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from stylegate.config.loader import CLI_SOURCE, Configuration, load_configuration
from stylegate.engine.evaluator import engine_findings, evaluate
from stylegate.errors import ConfigError
from stylegate.model import SCRIPT
from stylegate.rules import (
    INVALID_CONFIG,
    RULE_CRASHED,
    UNPARSABLE_FILE,
    RuleRegistry,
)
from stylegate.scanning.scanner import scan_project

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from stylegate.model import ProjectModel, ProjectNode
    from stylegate.rules import RawFinding, RuleContext


FILES = {
    "src/a.ts": "export const a = 1\n",
    "src/b.ts": "export const b = 2\n",
    "src/c.ts": "export const c = 3\n",
}


def _registry(calls: list[str]) -> RuleRegistry:
    reg = RuleRegistry()

    @reg.node_rule(
        "every-script", domain="naming", severity="warning", message="{file}", kinds=[SCRIPT]
    )
    def every_script(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
        calls.append(f"node:{node.path}")
        yield ctx.finding(node.path, line=1, file=node.name)

    @reg.project_rule("whole-project", domain="structure", severity="error", message="seen {count}")
    def whole_project(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
        calls.append("project")
        yield ctx.finding(".", count=len(model.parsed(SCRIPT)))

    @reg.node_rule(
        "opt-in", domain="formatting", severity="info", message="m", kinds=[SCRIPT], enabled=False
    )
    def opt_in(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
        calls.append("opt-in")
        return iter(())

    return reg


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class TestEvaluate:
    def test_node_and_project_rules(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project(FILES)
        calls: list[str] = []
        reg = _registry(calls)
        result = evaluate(reg, load_configuration(root, reg), scan_project(root), jobs=2)
        assert result.rules_run == 2
        assert result.nodes_evaluated == 3
        assert result.executions["every-script"] == 3
        assert result.executions["whole-project"] == 1
        assert not result.cancelled
        assert sorted(f.path for f in result.findings if f.rule_id == "every-script") == [
            "src/a.ts",
            "src/b.ts",
            "src/c.ts",
        ]

    def test_project_rules_run_after_node_rules(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project(FILES)
        calls: list[str] = []
        reg = _registry(calls)
        evaluate(reg, load_configuration(root, reg), scan_project(root), jobs=4)
        assert calls[-1] == "project"
        assert calls.count("project") == 1

    def test_disabled_rule_is_never_executed(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project(FILES)
        calls: list[str] = []
        reg = _registry(calls)
        result = evaluate(reg, load_configuration(root, reg), scan_project(root))
        assert "opt-in" not in calls
        assert result.executions["opt-in"] == 0

    def test_rule_only_sees_its_kinds(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project({"src/a.ts": "export {}\n", "src/app.css": ".a { color: red }\n"})
        calls: list[str] = []
        reg = _registry(calls)
        result = evaluate(reg, load_configuration(root, reg), scan_project(root))
        assert result.executions["every-script"] == 1
        assert "node:src/app.css" not in calls

    def test_empty_project(self, tmp_path: Path) -> None:
        calls: list[str] = []
        reg = _registry(calls)
        result = evaluate(reg, load_configuration(tmp_path, reg), scan_project(tmp_path))
        assert result.nodes_evaluated == 0
        assert [f.bindings for f in result.findings] == [{"count": 0}]


class TestCrashIsolation:
    def test_crashing_rule_becomes_finding(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project(FILES)
        calls: list[str] = []
        reg = _registry(calls)

        @reg.node_rule("explodes", domain="naming", severity="error", message="m", kinds=[SCRIPT])
        def explodes(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
            msg = "boom"
            raise ValueError(msg)

        result = evaluate(reg, load_configuration(root, reg), scan_project(root))
        crashed = [f for f in result.findings if f.rule_id == RULE_CRASHED]
        assert sorted(f.path for f in crashed) == ["src/a.ts", "src/b.ts", "src/c.ts"]
        assert crashed[0].bindings == {"rule": "explodes", "error": "ValueError: boom"}
        # the other rules still ran everywhere
        assert result.executions["every-script"] == 3
        assert "project" in calls

    def test_crashing_project_rule(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(FILES)
        reg = RuleRegistry()

        @reg.project_rule("broken", domain="structure", severity="error", message="m")
        def broken(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
            msg = "nope"
            raise RuntimeError(msg)

        result = evaluate(reg, load_configuration(root, reg), scan_project(root))
        assert [(f.rule_id, f.path) for f in result.findings] == [(RULE_CRASHED, ".")]
        assert result.findings[0].bindings["error"] == "RuntimeError: nope"


class TestCancellation:
    def test_cancel_stops_execution(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(FILES)
        calls: list[str] = []
        reg = _registry(calls)
        model = scan_project(root)
        cancel = threading.Event()
        cancel.set()
        result = evaluate(reg, load_configuration(root, reg), model, cancel=cancel)
        assert result.cancelled
        assert calls == []
        assert sum(result.executions.values()) == 0


# ---------------------------------------------------------------------------
# Engine findings
# ---------------------------------------------------------------------------


class TestEngineFindings:
    def test_config_errors(self, tmp_path: Path) -> None:
        configuration = Configuration(
            errors=(
                ConfigError("unknown rule id 'x'", source=".stylegate.yml", line=3),
                ConfigError("override 'y' must look like RULE_ID=SEVERITY", source=CLI_SOURCE),
            )
        )
        findings = engine_findings(configuration, scan_project(tmp_path))
        assert [(f.rule_id, f.path, f.line) for f in findings] == [
            (INVALID_CONFIG, ".stylegate.yml", 3),
            (INVALID_CONFIG, ".", None),
        ]
        assert findings[0].bindings == {"reason": "unknown rule id 'x'"}
        assert findings[1].bindings == {
            "reason": "<command line>: override 'y' must look like RULE_ID=SEVERITY"
        }

    def test_parse_errors(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project({"src/components/Broken.vue": "<template>\n  <div>\n"})
        findings = engine_findings(Configuration(), scan_project(root))
        assert [(f.rule_id, f.path) for f in findings] == [
            (UNPARSABLE_FILE, "src/components/Broken.vue")
        ]
        assert findings[0].line == 1

    def test_no_findings_for_clean_model(self, tmp_path: Path) -> None:
        assert engine_findings(Configuration(), scan_project(tmp_path)) == []
