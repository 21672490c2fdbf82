"""Evaluation pipeline: evaluator, resolver, report aggregation and the runner."""

from stylegate.engine.evaluator import EvaluationResult, engine_findings, evaluate
from stylegate.engine.report import (
    Report,
    build_report,
    format_json,
    format_porcelain,
    format_rich,
    format_text,
)
from stylegate.engine.resolver import Resolution, Violation, resolve
from stylegate.engine.runner import CheckResult, run_check

__all__ = [
    "CheckResult",
    "EvaluationResult",
    "Report",
    "Resolution",
    "Violation",
    "build_report",
    "engine_findings",
    "evaluate",
    "format_json",
    "format_porcelain",
    "format_rich",
    "format_text",
    "resolve",
    "run_check",
]
