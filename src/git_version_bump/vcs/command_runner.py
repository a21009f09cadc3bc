"""
External command execution for git_version_bump.

All git invocations go through :class:`CommandRunner`. Commands are given
as argument vectors and are never passed through a shell. Output is
captured with stderr folded into stdout, because git prints some of the
diagnostics we need to recognise on stderr and some on stdout. The
locale is pinned to ``C`` so those diagnostics are always in English.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from git_version_bump.errors import CommandFailure


logger = logging.getLogger(__name__)

# Exit status reported when the executable itself could not be started.
EXIT_NOT_FOUND = 127

_PINNED_LOCALE = {"LC_ALL": "C", "LANG": "C", "LANGUAGE": "C"}


@dataclass
class CommandOutcome:
    """Captured combined output and exit status of a finished command."""

    text: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


def _validate_argv(argv: Sequence[str]) -> None:
    if isinstance(argv, (str, bytes)) or not isinstance(argv, (list, tuple)):
        raise TypeError(f"argv must be a list or tuple of strings, not {type(argv).__name__}")
    if not argv:
        raise ValueError("argv must not be empty")
    for arg in argv:
        if not isinstance(arg, str):
            raise TypeError(f"command argument {arg!r} is not a string")


class CommandRunner:
    """Run external commands and capture their combined output."""

    def __init__(self, env: Optional[Dict[str, str]] = None) -> None:
        base = dict(os.environ if env is None else env)
        base.update(_PINNED_LOCALE)
        self.env = base

    def capture(self, argv: Sequence[str], cwd: Optional[Path] = None) -> CommandOutcome:
        """Run ``argv`` and return its outcome without raising on failure."""
        _validate_argv(argv)
        logger.debug("Executing command: %s (cwd=%s)", " ".join(argv), cwd or ".")
        try:
            result = subprocess.run(
                list(argv),
                cwd=cwd,
                env=self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.debug("Could not start %s: %s", argv[0], exc)
            return CommandOutcome(text=str(exc), exit_status=EXIT_NOT_FOUND)
        logger.debug("Command exited with %d: %s", result.returncode, result.stdout.strip())
        return CommandOutcome(text=result.stdout, exit_status=result.returncode)

    def run(self, argv: Sequence[str], description: str, cwd: Optional[Path] = None) -> str:
        """Run ``argv`` and return its combined output.

        Raises
        ------
        CommandFailure
            If the command exits with a non-zero status or cannot be started.
        """
        outcome = self.capture(argv, cwd=cwd)
        if not outcome.ok:
            raise CommandFailure(description, outcome.text, outcome.exit_status)
        return outcome.text

    def try_run(self, argv: Sequence[str], cwd: Optional[Path] = None) -> bool:
        """Return True if ``argv`` runs successfully, False otherwise."""
        try:
            self.run(argv, "probe", cwd=cwd)
        except CommandFailure:
            return False
        return True
