"""Project scanner: depth-first traversal, classification and parallel parsing."""

from __future__ import annotations

import fnmatch
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stylegate.errors import CycleError, ParseError, ScanCancelledError
from stylegate.model import DIRECTORY, OTHER, PARSED_KINDS, ProjectModel, ProjectNode
from stylegate.parsers import parse_file
from stylegate.scanning.classifier import classify, is_candidate
from stylegate.scanning.suppressions import SuppressionSet, extract_suppressions

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence
    from pathlib import Path

    from stylegate.model import FileKind, ParsedUnit

logger = logging.getLogger(__name__)

# Directories never descended into.
SKIP_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        ".hg",
        ".svn",
        "dist",
        "build",
        "coverage",
        ".cache",
        ".nuxt",
        ".output",
        ".next",
        ".vite",
        ".turbo",
        ".parcel-cache",
        "__pycache__",
        ".venv",
        "venv",
    }
)

# Files larger than this are classified by name only and not parsed.
MAX_FILE_BYTES = 2 * 1024 * 1024


@dataclass
class _Dir:
    """Traversal plan for one directory; children in sorted order."""

    rel: str
    entries: list[_Dir | str] = field(default_factory=list)


@dataclass(frozen=True)
class _FileResult:
    kind: FileKind
    unit: ParsedUnit | None = None
    content: str = ""
    error: ParseError | None = None
    suppressions: SuppressionSet | None = None


def _join(parent: str, name: str) -> str:
    return name if parent == "." else f"{parent}/{name}"


def is_ignored(rel: str, patterns: Sequence[str]) -> bool:
    """Return True if *rel* matches an ignore glob.

    Patterns match the relative path or the base name; ``dir/**`` also
    matches ``dir`` itself so the whole subtree is skipped.
    """
    name = rel.rsplit("/", 1)[-1]
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern.endswith("/"):
            pattern = pattern.rstrip("/")
        if not pattern:
            continue
        if fnmatch.fnmatchcase(rel, pattern) or fnmatch.fnmatchcase(name, pattern):
            return True
        if pattern.endswith("/**") and rel == pattern[:-3]:
            return True
    return False


class _Walker:
    """Depth-first directory walk recording files, skips and symlink cycles."""

    def __init__(
        self,
        root: Path,
        ignore: Sequence[str],
        cancel: threading.Event | None,
    ) -> None:
        self.root = root
        self.ignore = ignore
        self.cancel = cancel
        self.files: list[str] = []
        self.cycles: list[CycleError] = []

    def _check_cancel(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            msg = "scan cancelled during traversal"
            raise ScanCancelledError(msg)

    def walk(self) -> _Dir:
        st = os.stat(self.root)
        return self._walk(str(self.root), ".", frozenset({(st.st_dev, st.st_ino)}))

    def _walk(self, abs_dir: str, rel: str, ancestors: frozenset[tuple[int, int]]) -> _Dir:
        plan = _Dir(rel)
        try:
            with os.scandir(abs_dir) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            if rel == ".":
                raise
            logger.warning("Cannot list directory %s: %s", rel, exc)
            return plan

        for entry in entries:
            self._check_cancel()
            child_rel = _join(rel, entry.name)
            if is_ignored(child_rel, self.ignore):
                logger.debug("Ignored %s", child_rel)
                continue
            try:
                is_dir = entry.is_dir(follow_symlinks=True)
                is_file = not is_dir and entry.is_file(follow_symlinks=True)
            except OSError:
                logger.debug("Skipping unreadable entry %s", child_rel)
                continue

            if is_dir:
                if entry.name in SKIP_DIRS:
                    continue
                try:
                    st = entry.stat(follow_symlinks=True)
                except OSError as exc:
                    logger.warning("Cannot stat %s: %s", child_rel, exc)
                    continue
                identity = (st.st_dev, st.st_ino)
                if identity in ancestors:
                    target = os.path.realpath(entry.path)
                    try:
                        target = os.path.relpath(target, os.path.realpath(self.root))
                    except ValueError:
                        pass
                    target = target.replace(os.sep, "/")
                    logger.warning("Symlink cycle at %s -> %s", child_rel, target)
                    self.cycles.append(CycleError(child_rel, target))
                    continue
                plan.entries.append(self._walk(entry.path, child_rel, ancestors | {identity}))
            elif is_file:
                self.files.append(child_rel)
                plan.entries.append(child_rel)
        return plan


def _decode(data: bytes) -> str | None:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return None


def _scan_file(
    root: Path,
    rel: str,
    cancel: threading.Event | None,
) -> _FileResult | None:
    """Read, classify and parse one file; None when the scan was cancelled."""
    if cancel is not None and cancel.is_set():
        return None
    if not is_candidate(rel):
        return _FileResult(kind=OTHER)

    abs_path = root / rel
    try:
        size = abs_path.stat().st_size
        if size > MAX_FILE_BYTES:
            logger.info("Skipping parse of %s (%d bytes)", rel, size)
            return _FileResult(kind=classify(rel, ""))
        data = abs_path.read_bytes()
    except OSError as exc:
        kind = classify(rel, "")
        if kind == OTHER:
            return _FileResult(kind=kind)
        error = ParseError(f"unreadable file: {exc.strerror}", path=rel)
        return _FileResult(kind=kind, error=error)

    content = _decode(data)
    if content is None:
        kind = classify(rel, "")
        if kind == OTHER:
            return _FileResult(kind=kind)
        return _FileResult(kind=kind, error=ParseError("file is not valid UTF-8 text", path=rel))

    kind = classify(rel, content)
    suppressions = extract_suppressions(rel, content)
    if kind not in PARSED_KINDS:
        return _FileResult(kind=kind, content=content, suppressions=suppressions)
    try:
        unit = parse_file(rel, kind, content)
    except ParseError as exc:
        if not exc.path:
            exc.path = rel
        logger.debug("Parse error in %s: %s", rel, exc)
        return _FileResult(kind=kind, content=content, error=exc, suppressions=suppressions)
    return _FileResult(kind=kind, unit=unit, content=content, suppressions=suppressions)


def _build(plan: _Dir, results: dict[str, _FileResult]) -> ProjectNode:
    children: list[ProjectNode] = []
    for entry in plan.entries:
        if isinstance(entry, _Dir):
            children.append(_build(entry, results))
        else:
            result = results[entry]
            children.append(
                ProjectNode(
                    path=entry,
                    kind=result.kind,
                    unit=result.unit,
                    content=result.content,
                )
            )
    return ProjectNode(path=plan.rel, kind=DIRECTORY, children=tuple(children))


def scan_project(
    root: Path,
    *,
    ignore: Sequence[str] = (),
    jobs: int | None = None,
    cancel: threading.Event | None = None,
) -> ProjectModel:
    """Scan *root* into a :class:`ProjectModel`.

    Parameters
    ----------
    root:
        Project root directory.
    ignore:
        Glob patterns (relative POSIX paths or base names) to skip entirely.
    jobs:
        Parser worker count; ``None`` lets the executor decide.
    cancel:
        Cooperative cancellation flag checked between files.

    Raises
    ------
    ScanCancelledError
        When *cancel* is set before the model is assembled.
    OSError
        When *root* itself cannot be listed.
    """
    walker = _Walker(root, ignore, cancel)
    plan = walker.walk()

    results: dict[str, _FileResult] = {}
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        futures = {rel: pool.submit(_scan_file, root, rel, cancel) for rel in walker.files}
        cancelled = False
        for rel, future in futures.items():
            result = future.result()
            if result is None:
                cancelled = True
                continue
            results[rel] = result
        if cancelled or (cancel is not None and cancel.is_set()):
            for future in futures.values():
                future.cancel()
            msg = "scan cancelled before the project model was assembled"
            raise ScanCancelledError(msg)

    model_root = _build(plan, results)
    parse_errors = sorted(
        (r.error for r in results.values() if r.error is not None),
        key=lambda e: e.path,
    )
    suppressions = {
        rel: r.suppressions for rel, r in sorted(results.items()) if r.suppressions
    }
    logger.info(
        "Scanned %d files (%d parse errors, %d cycles)",
        len(results),
        len(parse_errors),
        len(walker.cycles),
    )
    return ProjectModel(
        root=model_root,
        parse_errors=tuple(parse_errors),
        cycles=tuple(sorted(walker.cycles, key=lambda c: c.path)),
        suppressions=suppressions,
    )
