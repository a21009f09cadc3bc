"""
Release tagging.

:class:`Tagger` creates the annotated ``v<version>`` tag for a release and
pushes commits and tags to the remote. It refuses to tag a dirty tree.
When release notes are requested, the user edits a draft listing the
commits since the previous release; saving the draft unchanged cancels
the release.

Tagging is not transactional. If the push fails after the tag was
created, the error propagates and the local tag is left for the user to
push or delete.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Optional

import click

from git_version_bump.debug import enable_debug_logging
from git_version_bump.errors import CommandFailure
from git_version_bump.vcs.command_runner import CommandRunner
from git_version_bump.vcs.git_client import GitClient
from git_version_bump.vcs.repository_probe import RepositoryProbe


logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"

RELEASE_NOTES_HEADER = """
# Release notes for v{version}.
#
# Put the name of the release on the first line and describe it below.
# Lines starting with '#' are dropped. Save the file unchanged to cancel
# the release.
#
# Commits since {previous}:

"""


def _file_digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


class Tagger:
    """Create and publish release tags for the repository at ``repo_root``.

    Parameters
    ----------
    repo_root : Path
        Repository to tag.
    runner : CommandRunner, optional
        Runner for git commands.
    remote : str, optional
        Remote to push to; git's default push destination when omitted.
    editor : str, optional
        Editor command used when ``$EDITOR`` is not set.
    echo : callable
        Receives user-facing messages.
    """

    def __init__(
        self,
        repo_root: Path,
        runner: Optional[CommandRunner] = None,
        remote: Optional[str] = None,
        editor: Optional[str] = None,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self.repo_root = repo_root
        self.runner = runner or CommandRunner()
        self.client = GitClient(repo_root, self.runner)
        self.probe = RepositoryProbe(self.runner)
        self.remote = remote
        self.editor = editor
        self.echo = echo
        enable_debug_logging()

    def tag_release(
        self,
        version: str,
        with_release_notes: bool = False,
        include_lite_tags: bool = False,
        dry_run: bool = False,
    ) -> bool:
        """Tag ``version`` and push it.

        Returns
        -------
        bool
            True if the tag was created and pushed, False if tagging was
            refused (dirty tree) or cancelled (release notes not edited).

        Raises
        ------
        CommandFailure
            If creating the tag or pushing fails.
        """
        if self.probe.is_dirty(self.repo_root):
            self.echo("You have uncommitted files.  Refusing to tag a dirty tree.")
            return False

        tag = f"v{version}"
        if dry_run:
            self.echo(f"Would tag {tag}{' with release notes' if with_release_notes else ''}")
            self.echo(f"Would push commits and tags to {self.remote or 'the default remote'}")
            return True

        if not with_release_notes:
            self.echo(f"Tagging version {version}...")
            self.client.create_tag(tag, message=f"Version {tag}")
            self._publish()
            return True

        previous = self.client.describe(
            include_lite_tags=include_lite_tags, always=True, dirty=False
        ).tag
        logger.debug("Previous release point is %s", previous)

        draft = tempfile.NamedTemporaryFile(
            mode="w", prefix="release-notes-", suffix=".txt", delete=False, encoding="utf-8"
        )
        draft_path = Path(draft.name)
        try:
            with draft:
                draft.write(RELEASE_NOTES_HEADER.format(version=version, previous=previous))
                for subject in self.client.commit_subjects(previous):
                    draft.write(f"{subject}\n")

            before = _file_digest(draft_path)
            self._edit(draft_path)
            if _file_digest(draft_path) == before:
                self.echo("Release notes not edited; aborting release.")
                return False

            self.echo(f"Tagging version {version}...")
            self.client.create_tag(tag, message_file=draft_path)
        finally:
            if draft_path.exists():
                os.unlink(draft_path)

        self._publish()
        return True

    def _publish(self) -> None:
        self.client.push(remote=self.remote)
        self.client.push(remote=self.remote, tags=True)

    def _edit(self, path: Path) -> None:
        """Open ``path`` in the user's editor and wait for it to exit."""
        command = os.environ.get("EDITOR") or self.editor or DEFAULT_EDITOR
        argv = shlex.split(command) + [str(path)]
        logger.debug("Launching editor: %s", " ".join(argv))
        try:
            result = subprocess.run(argv)
        except OSError as exc:
            raise CommandFailure("editing release notes", str(exc), 127) from exc
        if result.returncode != 0:
            raise CommandFailure("editing release notes", "", result.returncode)
