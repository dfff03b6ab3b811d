"""Typed build errors with stable, machine-readable kind codes.

Every failure in the orchestrator is fatal.  Errors carry the step and the
package that failed so the single top-level handler in
:func:`newt_build.orchestrator.main` can report them without guessing.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Stable error identifiers."""

    MISSING_TOOL = "E_MISSING_TOOL"
    MISSING_INPUT = "E_MISSING_INPUT"
    TOOL_FAILURE = "E_TOOL_FAILURE"
    DEPENDENCY = "E_DEPENDENCY"


class NativeBuildError(Exception):
    """Base error class that carries kind, step, package and an optional hint."""

    kind: ErrorKind
    step: str | None
    package: str | None
    hint: str | None

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        step: str | None = None,
        package: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.step = step
        self.package = package
        self.hint = hint

    def __str__(self) -> str:
        where = [part for part in (self.step, self.package) if part]
        message = super().__str__()
        if where:
            message = f"{' '.join(where)}: {message}"
        if self.hint:
            message = f"{message}\nHint: {self.hint}"
        return message


class MissingToolError(NativeBuildError):
    def __init__(self, message: str, *, step: str | None = None,
                 package: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, kind=ErrorKind.MISSING_TOOL, step=step,
                         package=package, hint=hint)


class MissingInputError(NativeBuildError):
    def __init__(self, message: str, *, step: str | None = None,
                 package: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, kind=ErrorKind.MISSING_INPUT, step=step,
                         package=package, hint=hint)


class ToolFailureError(NativeBuildError):
    """A child process could not be spawned or exited non-zero."""

    returncode: int | None

    def __init__(self, message: str, *, step: str | None = None,
                 package: str | None = None, hint: str | None = None,
                 returncode: int | None = None) -> None:
        super().__init__(message, kind=ErrorKind.TOOL_FAILURE, step=step,
                         package=package, hint=hint)
        self.returncode = returncode


class DependencyError(NativeBuildError):
    """pkg-config could not satisfy a required module after installation."""

    def __init__(self, message: str, *, step: str | None = None,
                 package: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, kind=ErrorKind.DEPENDENCY, step=step,
                         package=package, hint=hint)


__all__ = [
    "DependencyError",
    "ErrorKind",
    "MissingInputError",
    "MissingToolError",
    "NativeBuildError",
    "ToolFailureError",
]
