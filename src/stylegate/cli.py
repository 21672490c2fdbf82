"""CLI entry point: stylegate check / rules / init."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from stylegate import __version__

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_STARTER_CONFIG = """\
# stylegate configuration
version: 1
extends:
  - {preset}

# Glob patterns (relative to the project root) excluded from scanning.
ignore:
  - "**/*.generated.*"

# Toggle whole domains: on, off or a severity.
# domains:
#   formatting: off

# Per-rule settings: a severity (error, warning, info, off) or a mapping
# with severity, enabled and options.
rules:
  component-filename-pascal-case: error
#  formatting-max-line-length:
#    severity: warning
#    options:
#      max_length: 120
"""


class _EchoHandler(logging.Handler):
    """Write log records to the current stderr through click."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:  # logging must never break a command
            self.handleError(record)


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    package_logger = logging.getLogger("stylegate")
    for existing in list(package_logger.handlers):
        if isinstance(existing, _EchoHandler):
            package_logger.removeHandler(existing)
    handler = _EchoHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


@click.group()
@click.version_option(version=__version__, prog_name="stylegate")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors on stderr.")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Stylegate -- convention checks for front-end projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(verbose=verbose, quiet=quiet)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@main.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(path_type=Path),
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich for TTY, text otherwise).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Configuration file (default: .stylegate.yml in the project root).",
)
@click.option(
    "--preset",
    "presets",
    multiple=True,
    help="Apply a preset before the project file (repeatable).",
)
@click.option(
    "--rule",
    "overrides",
    multiple=True,
    metavar="ID=SEVERITY",
    help="Override a rule or domain severity (repeatable).",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads for scanning and evaluation.",
)
@click.option(
    "--output",
    "-o",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report to a file instead of stdout.",
)
def check(
    *,
    path: Path | None,
    fmt: str | None,
    config_path: Path | None,
    presets: tuple[str, ...],
    overrides: tuple[str, ...],
    jobs: int | None,
    output: Path | None,
) -> None:
    """Check a project against its conventions.

    Exit codes: 0 = pass, 1 = errors found, 2 = the check could not run.
    """
    from stylegate.engine.report import (
        format_json,
        format_porcelain,
        format_rich,
        format_text,
    )
    from stylegate.engine.runner import run_check
    from stylegate.errors import CheckError, RuleConflictError, ScanCancelledError

    project_root = path or Path.cwd()

    if fmt is None:
        fmt = "rich" if output is None and sys.stdout.isatty() else "text"

    try:
        result = run_check(
            project_root,
            config_path=config_path,
            presets=presets,
            overrides=overrides,
            jobs=jobs,
        )
    except (CheckError, RuleConflictError, ScanCancelledError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    report = result.report
    if fmt == "rich":
        text = format_rich(report, color=output is None)
    else:
        formatters = {
            "text": format_text,
            "json": format_json,
            "porcelain": format_porcelain,
        }
        text = formatters[fmt](report)

    if output is not None:
        if text and not text.endswith("\n"):
            text += "\n"
        output.write_text(text, encoding="utf-8")
    elif fmt == "rich":
        click.echo(text, nl=False)
    elif text:
        click.echo(text)

    if not report.passed:
        sys.exit(1)


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------


@main.command("rules")
@click.option("--domain", default=None, help="Only list rules of this domain.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def rules_cmd(*, domain: str | None, as_json: bool) -> None:
    """List the rule catalogue."""
    from stylegate.rules import DOMAINS, build_default_registry

    if domain is not None and domain not in DOMAINS:
        click.echo(
            f"Error: unknown domain '{domain}' (expected one of: {', '.join(DOMAINS)})",
            err=True,
        )
        sys.exit(2)

    registry = build_default_registry()
    selected = [r for r in registry if domain is None or r.domain == domain]

    if as_json:
        payload = [
            {
                "id": r.id,
                "domain": r.domain,
                "severity": r.default_severity,
                "scope": r.scope,
                "enabledByDefault": r.enabled_by_default,
                "options": dict(r.options),
                "description": r.description,
            }
            for r in selected
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    for current in registry.domains():
        in_domain = [r for r in selected if r.domain == current]
        if not in_domain:
            continue
        click.echo(f"{current}:")
        for r in in_domain:
            flag = "" if r.enabled_by_default else " (opt-in)"
            click.echo(f"  {r.id:<36} {r.default_severity:<8}{flag}")
            if r.description:
                click.echo(f"      {r.description}")
        click.echo("")
    click.echo(f"{len(selected)} rules")


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@main.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--preset",
    default="recommended",
    show_default=True,
    type=click.Choice(["recommended", "strict", "relaxed"]),
    help="Preset the starter configuration extends.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file.")
def init(*, path: Path | None, preset: str, force: bool) -> None:
    """Write a starter .stylegate.yml into a project."""
    from stylegate.config.loader import CONFIG_FILENAMES, find_config_file

    project_root = path or Path.cwd()
    existing = find_config_file(project_root)
    if existing is not None and not force:
        click.echo(
            f"Error: {existing.name} already exists (use --force to overwrite)",
            err=True,
        )
        sys.exit(2)

    target = existing or project_root / CONFIG_FILENAMES[0]
    target.write_text(_STARTER_CONFIG.format(preset=preset), encoding="utf-8")
    click.echo(f"Wrote {target}")
