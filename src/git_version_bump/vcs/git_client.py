"""
Git client implementation for git_version_bump.

This module wraps the git queries and the few mutating operations that
version resolution and release tagging need. It only issues commands and
parses their text output; every decision about what to do with the
answers is made by the resolvers and the tagger. All commands are routed
through :meth:`GitClient._run` so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from git_version_bump.errors import CommandFailure
from git_version_bump.vcs.command_runner import CommandOutcome, CommandRunner


logger = logging.getLogger(__name__)

# Only tags shaped like vMAJOR.MINOR.PATCH (and longer) count as releases.
RELEASE_TAG_PATTERN = "v[0-9]*.[0-9]*.*[0-9]"

VERSION_OVERRIDE_KEY = "versionBump.versionOverride"
DATE_OVERRIDE_KEY = "versionBump.dateOverride"

_DESCRIBE_RE = re.compile(
    r"^(?P<tag>.+?)(?:-(?P<count>\d+)-g(?P<hash>[0-9a-f]+))?(?P<dirty>-dirty)?$"
)

# stderr is folded into the output; these lines never carry an answer.
_DIAGNOSTIC_PREFIXES = ("warning:", "hint:")


@dataclass
class DescribeResult:
    """Parsed output of ``git describe``."""

    tag: str
    commits_since: Optional[int] = None
    abbrev_id: Optional[str] = None
    dirty: bool = False

    def to_version(self) -> str:
        """Collapse into a version string.

        The leading ``v`` is dropped, hyphens inside the tag become dots
        and the commit count becomes an extra dotted component. The
        abbreviated commit id is not kept.
        """
        version = self.tag[1:] if self.tag.startswith("v") else self.tag
        version = version.replace("-", ".")
        if self.commits_since:
            version = f"{version}.{self.commits_since}"
        return version


def _answer_lines(text: str) -> List[str]:
    """Drop blank lines and git's ``warning:``/``hint:`` chatter from combined output."""
    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.startswith(_DIAGNOSTIC_PREFIXES)
    ]


def parse_describe(text: str) -> DescribeResult:
    """Parse ``<tag>[-<N>-g<hash>][-dirty]`` into a :class:`DescribeResult`.

    Warnings git printed alongside a successful describe are ignored; the
    answer is the last remaining line.
    """
    lines = _answer_lines(text)
    line = lines[-1] if lines else ""
    match = _DESCRIBE_RE.match(line)
    if not line or match is None:
        raise ValueError(f"unrecognised describe output: {text!r}")
    count = match.group("count")
    return DescribeResult(
        tag=match.group("tag"),
        commits_since=int(count) if count is not None else None,
        abbrev_id=match.group("hash"),
        dirty=match.group("dirty") is not None,
    )


class GitClient:
    """Client for querying and tagging a Git repository."""

    def __init__(self, repo_root: Path, runner: Optional[CommandRunner] = None) -> None:
        self.repo_root = repo_root
        self.runner = runner or CommandRunner()

    # ------------------------------------------------------------------
    # Command plumbing
    # ------------------------------------------------------------------
    def _run(self, args: List[str], description: str) -> str:
        """Run a git command in the repository root and return its output.

        Raises
        ------
        CommandFailure
            If the command exits with a non-zero status.
        """
        return self.runner.run(["git"] + args, description, cwd=self.repo_root)

    def _capture(self, args: List[str]) -> CommandOutcome:
        return self.runner.capture(["git"] + args, cwd=self.repo_root)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def git_dir(self) -> str:
        """Return the path of the repository's git directory."""
        return self._run(["rev-parse", "--git-dir"], "locating git directory").strip()

    def describe(
        self, include_lite_tags: bool = False, always: bool = False, dirty: bool = True
    ) -> DescribeResult:
        """Describe ``HEAD`` relative to the nearest release tag.

        Parameters
        ----------
        include_lite_tags : bool
            Consider lightweight tags as well as annotated ones.
        always : bool
            Fall back to the abbreviated commit id when no tag matches.
        dirty : bool
            Mark the result when the working tree has modifications.
        """
        args = ["describe", f"--match={RELEASE_TAG_PATTERN}"]
        if dirty:
            args.append("--dirty")
        if include_lite_tags:
            args.append("--tags")
        if always:
            args.append("--always")
        output = self._run(args, "describing current version")
        return parse_describe(output)

    def commit_timestamps(self) -> List[int]:
        """Return the committer timestamp of every commit reachable from HEAD."""
        output = self._run(["log", "--format=%at"], "listing commit timestamps")
        return [int(line) for line in output.splitlines() if line.strip().isdigit()]

    def last_commit_date(self) -> str:
        """Return the date (YYYY-MM-DD) of the most recent commit."""
        output = self._run(
            ["log", "-1", "--format=%ad", "--date=short"], "getting last commit date"
        )
        lines = _answer_lines(output)
        return lines[-1] if lines else ""

    def commit_subjects(self, since: str) -> List[str]:
        """Return the subject line of every commit in ``since..HEAD``."""
        output = self._run(
            ["log", "--format=%s", f"{since}..HEAD"], "listing commits since last release"
        )
        return [line for line in output.splitlines() if line.strip()]

    def status_porcelain(self) -> str:
        """Return porcelain status output for tracked files only."""
        output = self._run(
            ["status", "--porcelain", "--untracked-files=no"], "checking working tree status"
        )
        return "".join(
            line
            for line in output.splitlines(keepends=True)
            if not line.startswith(_DIAGNOSTIC_PREFIXES)
        )

    # ------------------------------------------------------------------
    # Repository-local configuration
    # ------------------------------------------------------------------
    def get_config(self, key: str) -> Optional[str]:
        """Return the value of a git configuration key, or None when unset."""
        outcome = self._capture(["config", "--get", key])
        if outcome.exit_status == 1 and not outcome.text.strip():
            return None
        if not outcome.ok:
            raise CommandFailure(f"reading git config {key}", outcome.text, outcome.exit_status)
        return outcome.text.strip()

    def set_config(self, key: str, value: str) -> None:
        """Write a repository-local git configuration key."""
        self._run(["config", "--local", key, value], f"setting git config {key}")

    def unset_config(self, key: str) -> None:
        """Remove a repository-local git configuration key if it is set."""
        outcome = self._capture(["config", "--local", "--unset", key])
        # Exit status 5 means the key was not set.
        if not outcome.ok and outcome.exit_status != 5:
            raise CommandFailure(f"unsetting git config {key}", outcome.text, outcome.exit_status)

    # ------------------------------------------------------------------
    # Tagging and pushing
    # ------------------------------------------------------------------
    def create_tag(
        self, name: str, message: Optional[str] = None, message_file: Optional[Path] = None
    ) -> None:
        """Create an annotated tag from a message or a message file."""
        if message_file is not None:
            args = ["tag", "-a", "-F", str(message_file), name]
        else:
            args = ["tag", "-a", "-m", message or name, name]
        self._run(args, f"creating tag {name}")

    def push(self, remote: Optional[str] = None, tags: bool = False) -> None:
        """Push commits (or, with ``tags``, all tags) to ``remote``.

        Without a remote, git's default push destination is used.
        """
        args = ["push"]
        if remote:
            args.append(remote)
        if tags:
            args.append("--tags")
        self._run(args, "pushing tags" if tags else "pushing commits")
