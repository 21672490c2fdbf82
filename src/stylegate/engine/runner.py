"""Check orchestrator: load configuration, scan, evaluate, resolve, aggregate."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stylegate.config.loader import load_configuration
from stylegate.engine.evaluator import evaluate
from stylegate.engine.report import build_report
from stylegate.engine.resolver import resolve
from stylegate.errors import CheckError, ScanCancelledError
from stylegate.rules.catalogue import build_default_registry
from stylegate.scanning.scanner import scan_project

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence
    from pathlib import Path

    from stylegate.config.loader import Configuration
    from stylegate.engine.evaluator import EvaluationResult
    from stylegate.engine.report import Report
    from stylegate.model import ProjectModel
    from stylegate.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Everything one run produced."""

    report: Report
    configuration: Configuration
    model: ProjectModel
    evaluation: EvaluationResult
    elapsed_ms: float = 0.0


def run_check(
    project_root: Path,
    *,
    config_path: Path | None = None,
    presets: Sequence[str] = (),
    overrides: Sequence[str] = (),
    jobs: int | None = None,
    cancel: threading.Event | None = None,
    registry: RuleRegistry | None = None,
) -> CheckResult:
    """Run a complete check over *project_root*.

    Configuration loading and scanning are independent; both feed the
    evaluator, whose findings are resolved and aggregated into a Report.

    Raises
    ------
    CheckError
        When the root is missing or unreadable, or *config_path* is missing.
    RuleConflictError
        When the rule registry itself is inconsistent.
    ScanCancelledError
        When *cancel* is set during scanning or evaluation.
    """
    start = time.monotonic()

    if not project_root.is_dir():
        msg = f"Project root is not a directory: {project_root}"
        raise CheckError(msg)
    if not os.access(project_root, os.R_OK | os.X_OK):
        msg = f"Project root is not readable: {project_root}"
        raise CheckError(msg)

    if registry is None:
        registry = build_default_registry()

    configuration = load_configuration(
        project_root,
        registry,
        config_path=config_path,
        presets=presets,
        overrides=overrides,
    )

    try:
        model = scan_project(project_root, ignore=configuration.ignore, jobs=jobs, cancel=cancel)
    except OSError as exc:
        msg = f"Cannot scan {project_root}: {exc}"
        raise CheckError(msg) from exc

    evaluation = evaluate(registry, configuration, model, jobs=jobs, cancel=cancel)
    if evaluation.cancelled:
        msg = "check cancelled during rule evaluation"
        raise ScanCancelledError(msg)
    resolution = resolve(evaluation.findings, configuration, model.suppressions, registry)
    report = build_report(resolution)

    elapsed = (time.monotonic() - start) * 1000
    logger.info(
        "Check finished in %.0f ms: %d errors, %d warnings, %d info, %d suppressed",
        elapsed,
        report.errors,
        report.warnings,
        report.info,
        report.suppressed,
    )
    return CheckResult(
        report=report,
        configuration=configuration,
        model=model,
        evaluation=evaluation,
        elapsed_ms=elapsed,
    )
