"""Tests for stylegate.engine.report — aggregation and rendering."""

from __future__ import annotations

import json

from stylegate.engine.report import (
    build_report,
    dedupe,
    format_json,
    format_porcelain,
    format_rich,
    format_text,
    report_to_dict,
)
from stylegate.engine.resolver import Resolution, Violation


def _v(
    path: str,
    line: int | None,
    rule_id: str = "some-rule",
    severity: str = "warning",
    column: int | None = None,
    message: str = "msg",
) -> Violation:
    return Violation(
        rule_id=rule_id,
        path=path,
        line=line,
        column=column,
        severity=severity,
        message=message,
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


class TestAggregation:
    def test_sorted_by_path_line_column_rule(self) -> None:
        resolution = Resolution(
            violations=(
                _v("src/b.ts", 1),
                _v("src/a.ts", 10),
                _v("src/a.ts", 2, rule_id="z-rule"),
                _v("src/a.ts", 2, rule_id="a-rule"),
                _v("src/a.ts", None),
                _v("src/a.ts", 2, column=5, rule_id="a-rule"),
            )
        )
        report = build_report(resolution)
        assert [(v.path, v.line, v.column, v.rule_id) for v in report.violations] == [
            ("src/a.ts", None, None, "some-rule"),
            ("src/a.ts", 2, None, "a-rule"),
            ("src/a.ts", 2, None, "z-rule"),
            ("src/a.ts", 2, 5, "a-rule"),
            ("src/a.ts", 10, None, "some-rule"),
            ("src/b.ts", 1, None, "some-rule"),
        ]

    def test_dedupe_keeps_most_severe(self) -> None:
        kept = dedupe(
            [
                _v("src/a.ts", 1, severity="info"),
                _v("src/a.ts", 1, severity="error"),
                _v("src/a.ts", 1, severity="warning"),
            ]
        )
        assert [v.severity for v in kept] == ["error"]

    def test_counts_and_pass(self) -> None:
        report = build_report(
            Resolution(
                violations=(
                    _v("a", 1, severity="warning"),
                    _v("a", 2, severity="info"),
                    _v("a", 3, severity="info"),
                ),
                suppressed=(_v("a", 4, severity="error"),),
            )
        )
        assert (report.errors, report.warnings, report.info, report.suppressed) == (0, 1, 2, 1)
        assert report.passed

    def test_single_error_fails(self) -> None:
        report = build_report(Resolution(violations=(_v("a", 1, severity="error"),)))
        assert not report.passed

    def test_empty_report_passes(self) -> None:
        report = build_report(Resolution())
        assert report.passed
        assert report.violations == ()

    def test_grouping(self) -> None:
        report = build_report(
            Resolution(violations=(_v("b", 1, rule_id="r2"), _v("a", 1, rule_id="r1")))
        )
        assert list(report.by_path()) == ["a", "b"]
        assert list(report.by_rule()) == ["r1", "r2"]


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


REPORT = build_report(
    Resolution(
        violations=(
            _v("src/A.vue", 3, rule_id="bad-name", severity="error", column=7, message="Bad"),
            _v(".", None, rule_id="whole", severity="info", message="Global"),
        )
    )
)


class TestTextFormat:
    def test_lines_and_summary(self) -> None:
        assert format_text(REPORT).splitlines() == [
            ".:0:0 [info] whole — Global",
            "src/A.vue:3:7 [error] bad-name — Bad",
            "1 errors, 0 warnings, 1 info",
        ]

    def test_empty(self) -> None:
        assert format_text(build_report(Resolution())) == "0 errors, 0 warnings, 0 info"


class TestJsonFormat:
    def test_document_shape(self) -> None:
        data = json.loads(format_json(REPORT))
        assert set(data) == {"violations", "summary", "pass"}
        assert data["pass"] is False
        assert data["summary"] == {"errors": 1, "warnings": 0, "info": 1, "suppressed": 0}
        assert data["violations"][0] == {
            "path": ".",
            "line": None,
            "column": None,
            "ruleId": "whole",
            "severity": "info",
            "message": "Global",
        }

    def test_rendering_does_not_alter_report(self) -> None:
        before = report_to_dict(REPORT)
        format_json(REPORT)
        format_text(REPORT)
        format_rich(REPORT, color=False)
        assert report_to_dict(REPORT) == before


class TestPorcelainFormat:
    def test_lines(self) -> None:
        assert format_porcelain(REPORT).splitlines() == [
            ".:::info:whole:Global",
            "src/A.vue:3:7:error:bad-name:Bad",
        ]

    def test_empty(self) -> None:
        assert format_porcelain(build_report(Resolution())) == ""


class TestRichFormat:
    def test_plain_rendering(self) -> None:
        output = format_rich(REPORT, color=False)
        assert "src/A.vue" in output
        assert "bad-name" in output
        assert "failed" in output
        assert "1 errors, 0 warnings, 1 info" in output
        assert "\x1b[" not in output

    def test_passed_with_suppressed(self) -> None:
        report = build_report(Resolution(suppressed=(_v("a", 1),)))
        output = format_rich(report, color=False)
        assert "passed" in output
        assert "(1 suppressed)" in output
