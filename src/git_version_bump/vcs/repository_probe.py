"""
Environment questions asked before resolving a version.

The probe decides which directory is treated as the repository and
answers whether it is a repository at all, whether its working tree is
dirty, and whether git is installed.
"""

from __future__ import annotations

import inspect
import logging
from pathlib import Path
from typing import Optional

from git_version_bump.errors import CommandFailure
from git_version_bump.vcs.command_runner import CommandRunner
from git_version_bump.vcs.git_client import GitClient


logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def find_caller_file() -> Optional[Path]:
    """Return the first source file on the call stack outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if not (filename.startswith("<") and filename.endswith(">")):
                path = Path(filename).resolve()
                if _PACKAGE_DIR not in path.parents:
                    return path
            frame = frame.f_back
    finally:
        del frame
    return None


class RepositoryProbe:
    """Answer questions about the repository the caller lives in."""

    def __init__(self, runner: Optional[CommandRunner] = None) -> None:
        self.runner = runner or CommandRunner()

    def repository_root(self, use_local_dir: bool, caller_file: Optional[Path] = None) -> Path:
        """Return the directory to interrogate.

        With ``use_local_dir`` this is the current directory. Otherwise it is
        the directory holding the caller's source file, so that a library
        versions its own checkout rather than whatever directory the
        application using it happens to run in.
        """
        if use_local_dir:
            return Path.cwd()
        if caller_file is None:
            caller_file = find_caller_file()
        if caller_file is None:
            logger.debug("No caller file found on the stack; using current directory")
            return Path.cwd()
        return Path(caller_file).resolve().parent

    def is_repository(self, root: Path) -> bool:
        """Return True if ``root`` is inside a git work tree."""
        try:
            GitClient(root, self.runner).git_dir()
        except CommandFailure:
            return False
        return True

    def is_dirty(self, root: Path) -> bool:
        """Return True if tracked files under ``root`` have uncommitted changes.

        Both working-tree edits and staged changes count; untracked files
        do not.
        """
        dirty = bool(GitClient(root, self.runner).status_porcelain().strip())
        logger.debug("Working tree at %s is %s", root, "dirty" if dirty else "clean")
        return dirty

    def is_tool_available(self) -> bool:
        """Return True if the git executable responds."""
        return self.runner.try_run(["git", "--version"])
