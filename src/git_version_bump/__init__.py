"""
Top-level package for git_version_bump.

Version numbers and release dates are derived from git history: see
:class:`~git_version_bump.version_resolver.VersionResolver` and
:class:`~git_version_bump.date_resolver.DateResolver`. New releases are
tagged with :class:`~git_version_bump.tagger.Tagger`, and the
``git-version-bump`` command is provided by :mod:`git_version_bump.cli`.
"""

import logging
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "__version__",
    "CommandFailure",
    "DateResolver",
    "GitVersionBumpError",
    "InvalidVersionComponent",
    "RuntimeUnavailable",
    "Tagger",
    "VersionResolver",
    "VersionUnobtainable",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Our own version comes from installed metadata, never from git at import
# time.
try:
    __version__ = version("git-version-bump")
except PackageNotFoundError:
    __version__ = "0.0.0"

from git_version_bump.errors import (  # noqa: E402
    CommandFailure,
    GitVersionBumpError,
    InvalidVersionComponent,
    RuntimeUnavailable,
    VersionUnobtainable,
)
from git_version_bump.date_resolver import DateResolver  # noqa: E402
from git_version_bump.tagger import Tagger  # noqa: E402
from git_version_bump.version_resolver import VersionResolver  # noqa: E402
