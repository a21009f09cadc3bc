"""
Exception types raised by git_version_bump.

Every error the package raises on purpose derives from
:class:`GitVersionBumpError`, so command-line callers can catch one type
and turn it into a diagnostic and an exit code. Misuse of the API
(wrong argument types, empty command lines) raises the built-in
``TypeError``/``ValueError`` instead and is never caught.
"""

from __future__ import annotations


class GitVersionBumpError(Exception):
    """Base class for all git_version_bump errors."""

    pass


class CommandFailure(GitVersionBumpError):
    """Raised when an external command exits with a non-zero status.

    The captured combined output is kept so that callers can inspect the
    diagnostic text (for example to tell "no tags yet" apart from other
    failures).
    """

    def __init__(self, description: str, output: str, exit_status: int) -> None:
        self.description = description
        self.output = output
        self.exit_status = exit_status
        detail = output.strip() or "no output"
        super().__init__(f"{description} failed (exit {exit_status}): {detail}")


class VersionUnobtainable(GitVersionBumpError):
    """Raised when no tier of the version resolution chain produced a version."""

    pass


class RuntimeUnavailable(GitVersionBumpError):
    """Raised when no release date can be determined."""

    pass


class InvalidVersionComponent(GitVersionBumpError, ValueError):
    """Raised when a numeric version component is not numeric."""

    def __init__(self, component: str, version: str) -> None:
        self.component = component
        self.version = version
        super().__init__(
            f"{component!r} (part of {version!r}) is not a numeric version component"
        )
