"""
Version control system (VCS) integration.

This package contains the command runner used for every external call,
the git client exposing the queries version resolution needs, and the
repository probe that locates and inspects the repository.
"""

from .command_runner import CommandOutcome, CommandRunner  # noqa: F401
from .git_client import DescribeResult, GitClient  # noqa: F401
from .repository_probe import RepositoryProbe  # noqa: F401
