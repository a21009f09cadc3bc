"""
Release date resolution.

The release date is, in order of preference: the override stored in
``git config versionBump.dateOverride``; today, if the working tree is
dirty (the build is newer than any commit); the date of the last commit;
and, outside any repository, the date recorded with the installed
package.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from git_version_bump.debug import enable_debug_logging
from git_version_bump.errors import CommandFailure, RuntimeUnavailable
from git_version_bump.metadata_fallback import PackageMetadataFallback
from git_version_bump.vcs.command_runner import CommandRunner
from git_version_bump.vcs.git_client import DATE_OVERRIDE_KEY, GitClient
from git_version_bump.vcs.repository_probe import RepositoryProbe, find_caller_file
from git_version_bump.version_resolver import NO_COMMIT_DIAGNOSTICS


logger = logging.getLogger(__name__)


class DateResolver:
    """Resolve the release date of the repository a caller lives in."""

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        probe: Optional[RepositoryProbe] = None,
        metadata: Optional[PackageMetadataFallback] = None,
        caller_file: Optional[Path] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.probe = probe or RepositoryProbe(self.runner)
        self.metadata = metadata or PackageMetadataFallback()
        self.caller_file = caller_file
        self.today = today or date.today
        enable_debug_logging()

    def _today(self) -> str:
        return self.today().isoformat()

    def resolve(self, use_local_dir: bool = False) -> str:
        """Return the release date as ``YYYY-MM-DD``.

        Raises
        ------
        RuntimeUnavailable
            If no date could be determined, or if ``use_local_dir`` was
            requested and the current directory is not a repository.
        """
        caller = self.caller_file or find_caller_file()
        root = self.probe.repository_root(use_local_dir, caller)

        if not (self.probe.is_tool_available() and self.probe.is_repository(root)):
            if use_local_dir:
                raise RuntimeUnavailable(
                    f"{root} is not a git repository and the local directory was requested explicitly"
                )
            info = self.metadata.lookup(caller)
            if info is None or info.release_date is None:
                raise RuntimeUnavailable(
                    f"{root} is not a git repository and no installed package records a release date"
                )
            logger.debug("Using release date %s from package %s", info.release_date, info.name)
            return info.release_date.isoformat()

        client = GitClient(root, self.runner)
        try:
            override = client.get_config(DATE_OVERRIDE_KEY)
            if override and override.strip():
                logger.debug("Using date override %r", override.strip())
                return override.strip()

            if self.probe.is_dirty(root):
                logger.debug("Working tree is dirty; using today's date")
                return self._today()

            try:
                last = client.last_commit_date()
            except CommandFailure as exc:
                if not any(diagnostic in exc.output for diagnostic in NO_COMMIT_DIAGNOSTICS):
                    raise
                logger.debug("No commits yet in %s; using today's date", root)
                return self._today()
        except CommandFailure as exc:
            raise RuntimeUnavailable(f"Could not determine release date of {root}: {exc}") from exc

        logger.debug("Last commit in %s was made on %s", root, last)
        return last or self._today()
