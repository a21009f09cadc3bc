"""
Version resolution from git history.

:class:`VersionResolver` turns the state of a repository into a version
string by trying, in order:

1. an explicit override stored in ``git config versionBump.versionOverride``;
2. ``git describe`` against the nearest ``vX.Y.Z`` release tag, with the
   number of commits since the tag appended and a timestamped suffix when
   the working tree is dirty;
3. for a repository that has no release tags yet, the installed package
   metadata and then the ``0.0.0.1.ENOTAG`` sentinel;
4. without a repository at all, the installed package metadata.

If nothing works, :class:`VersionUnobtainable` is raised. Failures of
individual git commands never escape the resolver.

A second scheme, :meth:`VersionResolver.commit_date_version`, ignores tags
and derives ``0.YYYYMMDD.N`` from the date of the newest commit, where
``N`` counts the other commits made that day. It suits artifacts for
which semantic-versioning compatibility promises mean nothing but strict
ordering does. Builds of divergent branches on the same day cannot be
told apart, since a commit id cannot be embedded without being mistaken
for a pre-release marker.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from git_version_bump import version_string
from git_version_bump.debug import enable_debug_logging
from git_version_bump.errors import CommandFailure, VersionUnobtainable
from git_version_bump.metadata_fallback import PackageInfo, PackageMetadataFallback
from git_version_bump.vcs.command_runner import CommandRunner
from git_version_bump.vcs.git_client import VERSION_OVERRIDE_KEY, GitClient
from git_version_bump.vcs.repository_probe import RepositoryProbe, find_caller_file


logger = logging.getLogger(__name__)

# Diagnostics (C locale) meaning "nothing to describe yet" rather than a
# real failure.
NO_TAG_DIAGNOSTICS = (
    "No names found, cannot describe anything",
    "No tags can describe",
    "No annotated tags can describe",
    "Not a valid object name HEAD",
    "ambiguous argument 'HEAD'",
    "needed a single revision",
    "does not have any commits yet",
    "bad revision 'HEAD'",
)

NO_COMMIT_DIAGNOSTICS = (
    "does not have any commits yet",
    "bad default revision 'HEAD'",
    "ambiguous argument 'HEAD'",
    "Not a valid object name HEAD",
)


def _matches_any(output: str, diagnostics: Tuple[str, ...]) -> bool:
    return any(diagnostic in output for diagnostic in diagnostics)


class VersionResolver:
    """Resolve the version of the repository a caller lives in.

    Parameters
    ----------
    runner : CommandRunner, optional
        Runner for git commands.
    probe : RepositoryProbe, optional
        Probe used to locate and inspect the repository.
    metadata : PackageMetadataFallback, optional
        Source of versions when no repository is available.
    caller_file : Path, optional
        Source file whose checkout should be versioned. Found from the
        call stack when omitted.
    clock : callable, optional
        Returns the current local time; used for dirty suffixes.
    use_cache : bool
        Remember results for the lifetime of this resolver.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        probe: Optional[RepositoryProbe] = None,
        metadata: Optional[PackageMetadataFallback] = None,
        caller_file: Optional[Path] = None,
        clock: Optional[Callable[[], datetime]] = None,
        use_cache: bool = True,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.probe = probe or RepositoryProbe(self.runner)
        self.metadata = metadata or PackageMetadataFallback()
        self.caller_file = caller_file
        self.clock = clock or datetime.now
        self.use_cache = use_cache
        self._cache: Dict[tuple, str] = {}
        enable_debug_logging()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def _client(self, root: Path) -> GitClient:
        return GitClient(root, self.runner)

    def _caller(self) -> Optional[Path]:
        return self.caller_file or find_caller_file()

    def _root(self, use_local_dir: bool) -> Path:
        return self.probe.repository_root(use_local_dir, self._caller())

    def _cached(self, key: tuple, compute: Callable[[], str]) -> str:
        if self.use_cache and key in self._cache:
            return self._cache[key]
        value = compute()
        if self.use_cache:
            self._cache[key] = value
        return value

    def clear_cache(self) -> None:
        self._cache.clear()

    def _has_repository(self, root: Path) -> bool:
        if not self.probe.is_tool_available():
            logger.debug("git is not available")
            return False
        if not self.probe.is_repository(root):
            logger.debug("%s is not inside a git repository", root)
            return False
        return True

    def _package_info(self, use_local_dir: bool) -> Optional[PackageInfo]:
        if use_local_dir:
            return None
        return self.metadata.lookup(self._caller())

    def _metadata_version(self, use_local_dir: bool, root: Path) -> str:
        if use_local_dir:
            raise VersionUnobtainable(
                f"{root} is not a git repository and the local directory was requested explicitly"
            )
        info = self._package_info(use_local_dir)
        if info is None:
            raise VersionUnobtainable(
                f"{root} is not a git repository and the caller belongs to no installed package"
            )
        logger.debug("Using version %s from package %s", info.version, info.name)
        return info.version

    def _override(self, client: GitClient) -> Optional[str]:
        value = client.get_config(VERSION_OVERRIDE_KEY)
        if value and value.strip():
            logger.debug("Using version override %r", value.strip())
            return value.strip()
        return None

    def _dirty_suffix(self) -> str:
        return version_string.dirty_suffix(self.clock())

    # ------------------------------------------------------------------
    # Tag-based versions
    # ------------------------------------------------------------------
    def resolve(self, use_local_dir: bool = False, include_lite_tags: bool = False) -> str:
        """Return the current version string.

        Parameters
        ----------
        use_local_dir : bool
            Version the current directory instead of the caller's checkout.
            This also rules out the package-metadata fallback.
        include_lite_tags : bool
            Consider lightweight tags as well as annotated ones.

        Raises
        ------
        VersionUnobtainable
            If no version could be determined.
        """
        root = self._root(use_local_dir)
        key = ("tag", use_local_dir, include_lite_tags, root)
        return self._cached(key, lambda: self._resolve_tag(root, use_local_dir, include_lite_tags))

    def _resolve_tag(self, root: Path, use_local_dir: bool, include_lite_tags: bool) -> str:
        if not self._has_repository(root):
            return self._metadata_version(use_local_dir, root)

        client = self._client(root)
        try:
            override = self._override(client)
            if override:
                return override
            described = client.describe(include_lite_tags=include_lite_tags)
        except CommandFailure as exc:
            if _matches_any(exc.output, NO_TAG_DIAGNOSTICS):
                logger.debug("No release tags found in %s", root)
                info = self._package_info(use_local_dir)
                if info is not None:
                    logger.debug("Using version %s from package %s", info.version, info.name)
                    return info.version
                return version_string.ENOTAG
            raise VersionUnobtainable(f"Could not describe {root}: {exc}") from exc
        except ValueError as exc:
            raise VersionUnobtainable(str(exc)) from exc

        version = described.to_version()
        if described.dirty:
            version = f"{version}.{self._dirty_suffix()}"
        logger.debug("Described %s as %s", root, version)
        return version

    def major_version(self, use_local_dir: bool = False, include_lite_tags: bool = False) -> int:
        return version_string.major_version(self.resolve(use_local_dir, include_lite_tags))

    def minor_version(self, use_local_dir: bool = False, include_lite_tags: bool = False) -> int:
        return version_string.minor_version(self.resolve(use_local_dir, include_lite_tags))

    def patch_version(self, use_local_dir: bool = False, include_lite_tags: bool = False) -> int:
        return version_string.patch_version(self.resolve(use_local_dir, include_lite_tags))

    def internal_revision(self, use_local_dir: bool = False, include_lite_tags: bool = False) -> str:
        return version_string.internal_revision(self.resolve(use_local_dir, include_lite_tags))

    # ------------------------------------------------------------------
    # Commit-date versions
    # ------------------------------------------------------------------
    def commit_date_version(self, use_local_dir: bool = False) -> str:
        """Return ``0.YYYYMMDD.N`` for the newest commit, ignoring tags."""
        root = self._root(use_local_dir)
        key = ("commit_date", use_local_dir, False, root)
        return self._cached(key, lambda: self._resolve_commit_date(root, use_local_dir, "0."))

    def commit_date_version_string(self, use_local_dir: bool = False) -> str:
        """Return ``YYYYMMDD.N`` for the newest commit, without the leading ``0.``."""
        root = self._root(use_local_dir)
        key = ("commit_date_string", use_local_dir, False, root)
        return self._cached(key, lambda: self._resolve_commit_date(root, use_local_dir, ""))

    def _resolve_commit_date(self, root: Path, use_local_dir: bool, prefix: str) -> str:
        if not self._has_repository(root):
            return self._metadata_version(use_local_dir, root)

        client = self._client(root)
        try:
            override = self._override(client)
            if override:
                return override
            try:
                timestamps = client.commit_timestamps()
            except CommandFailure as exc:
                if not _matches_any(exc.output, NO_COMMIT_DIAGNOSTICS):
                    raise
                timestamps = []

            if not timestamps:
                logger.debug("No commits found in %s", root)
                info = self._package_info(use_local_dir)
                if info is not None:
                    return info.version
                return version_string.ENOCOMMITS

            days = [datetime.fromtimestamp(ts).strftime("%Y%m%d") for ts in timestamps]
            newest = max(days)
            version = f"{prefix}{newest}.{days.count(newest) - 1}"
            if self.probe.is_dirty(root):
                version = f"{version}.{self._dirty_suffix()}"
        except CommandFailure as exc:
            raise VersionUnobtainable(f"Could not read commit history of {root}: {exc}") from exc

        logger.debug("Commit-date version of %s is %s", root, version)
        return version
