"""Report aggregation and rendering."""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stylegate.engine.resolver import Resolution, Violation

SEVERITY_ORDER: dict[str, int] = {"error": 0, "warning": 1, "info": 2}

_SEVERITY_STYLES: dict[str, tuple[str, str]] = {
    "error": ("✗", "bold red"),
    "warning": ("!", "yellow"),
    "info": ("i", "cyan"),
}

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Report:
    """Sorted, de-duplicated violations plus the pass/fail decision."""

    violations: tuple[Violation, ...] = ()
    errors: int = 0
    warnings: int = 0
    info: int = 0
    suppressed: int = 0

    @property
    def passed(self) -> bool:
        return self.errors == 0

    def by_path(self) -> dict[str, list[Violation]]:
        groups: dict[str, list[Violation]] = defaultdict(list)
        for v in self.violations:
            groups[v.path].append(v)
        return dict(groups)

    def by_rule(self) -> dict[str, list[Violation]]:
        groups: dict[str, list[Violation]] = defaultdict(list)
        for v in self.violations:
            groups[v.rule_id].append(v)
        return dict(sorted(groups.items()))


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def sort_key(v: Violation) -> tuple[str, bool, int, bool, int, str]:
    """Order by path, line, column, rule id; absent line/column sort first."""
    return (
        v.path,
        v.line is not None,
        v.line or 0,
        v.column is not None,
        v.column or 0,
        v.rule_id,
    )


def dedupe(violations: Iterable[Violation]) -> list[Violation]:
    """Collapse violations sharing an identity, keeping the most severe."""
    kept: dict[tuple[str, str, int | None, int | None], Violation] = {}
    for v in violations:
        current = kept.get(v.identity)
        if current is None or (SEVERITY_ORDER[v.severity], v.message) < (
            SEVERITY_ORDER[current.severity],
            current.message,
        ):
            kept[v.identity] = v
    return sorted(kept.values(), key=sort_key)


def build_report(resolution: Resolution) -> Report:
    """Aggregate a :class:`Resolution` into a :class:`Report`.

    The run passes iff no remaining violation has severity ``error``.
    """
    violations = dedupe(resolution.violations)
    counts = {"error": 0, "warning": 0, "info": 0}
    for v in violations:
        counts[v.severity] += 1
    return Report(
        violations=tuple(violations),
        errors=counts["error"],
        warnings=counts["warning"],
        info=counts["info"],
        suppressed=len(dedupe(resolution.suppressed)),
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def summary_line(report: Report) -> str:
    return f"{report.errors} errors, {report.warnings} warnings, {report.info} info"


def format_text(report: Report) -> str:
    """One line per violation, then the summary line.

    Format: ``<path>:<line>:<col> [<severity>] <rule-id> — <message>``;
    an absent line or column is rendered as ``0``.
    """
    lines = [
        f"{v.path}:{v.line or 0}:{v.column or 0} [{v.severity}] {v.rule_id} — {v.message}"
        for v in report.violations
    ]
    lines.append(summary_line(report))
    return "\n".join(lines)


def report_to_dict(report: Report) -> dict[str, object]:
    return {
        "violations": [
            {
                "path": v.path,
                "line": v.line,
                "column": v.column,
                "ruleId": v.rule_id,
                "severity": v.severity,
                "message": v.message,
            }
            for v in report.violations
        ],
        "summary": {
            "errors": report.errors,
            "warnings": report.warnings,
            "info": report.info,
            "suppressed": report.suppressed,
        },
        "pass": report.passed,
    }


def format_json(report: Report) -> str:
    """Format a Report as the structured machine document."""
    return json.dumps(report_to_dict(report), indent=2)


def format_porcelain(report: Report) -> str:
    """One colon-separated line per violation: ``path:line:col:severity:rule_id:message``.

    Absent line/column are empty strings.  Returns an empty string when
    there are no violations.
    """
    lines: list[str] = []
    for v in report.violations:
        line = str(v.line) if v.line is not None else ""
        column = str(v.column) if v.column is not None else ""
        lines.append(f"{v.path}:{line}:{column}:{v.severity}:{v.rule_id}:{v.message}")
    return "\n".join(lines)


def format_rich(report: Report, *, color: bool = True, width: int = 100) -> str:
    """Render a Report with Rich: one table per file, then the summary."""
    from io import StringIO

    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table
    from rich.text import Text

    buf = StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color, width=width)

    for path, violations in report.by_path().items():
        console.rule(f"[bold]{escape(path)}[/bold]", style="blue", align="left")
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Sev", width=2)
        table.add_column("Loc", justify="right", style="dim")
        table.add_column("Rule", style="cyan", no_wrap=True)
        table.add_column("Message")
        for v in violations:
            indicator, style = _SEVERITY_STYLES.get(v.severity, ("?", "white"))
            table.add_row(
                Text(indicator, style=style),
                f"{v.line or 0}:{v.column or 0}",
                Text(v.rule_id),
                Text(v.message),
            )
        console.print(table)
        console.print()

    status = Text()
    if report.passed:
        status.append("✓ passed", style="bold green")
    else:
        status.append("✗ failed", style="bold red")
    status.append(f"  {summary_line(report)}")
    if report.suppressed:
        status.append(f" ({report.suppressed} suppressed)", style="dim")
    console.print(status)
    return buf.getvalue()
