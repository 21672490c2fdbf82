"""Exception hierarchy shared by every stage of a check run."""

from __future__ import annotations


class StylegateError(Exception):
    """Base class for all engine errors."""


class ConfigError(StylegateError):
    """A configuration source or override could not be applied.

    Recovered per source: the loader collects these and the run surfaces
    them as ``invalid-config`` violations instead of aborting.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source = source
        self.line = line

    def __str__(self) -> str:
        if self.source and self.line is not None:
            return f"{self.source}:{self.line}: {self.message}"
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class ParseError(StylegateError):
    """A single file's content could not be normalized into a fact sheet."""

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line
        self.column = column

    def __str__(self) -> str:
        loc = self.path
        if self.line is not None:
            loc += f":{self.line}"
        return f"{loc}: {self.message}" if loc else self.message


class CycleError(StylegateError):
    """A symbolic link resolves to a directory already on the traversal path."""

    def __init__(self, path: str, target: str) -> None:
        super().__init__(f"Symbolic link '{path}' points back to '{target}'")
        self.path = path
        self.target = target


class RuleConflictError(StylegateError):
    """Two rules were registered under the same id (fatal)."""


class CheckError(StylegateError):
    """The run could not produce a report at all (unreadable root, missing config)."""


class ScanCancelledError(StylegateError):
    """The run was cancelled before the Project Model or the Report was assembled."""
