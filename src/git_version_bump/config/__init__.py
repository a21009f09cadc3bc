"""
Configuration loading for git_version_bump.

Provides a loader for the optional per-repository settings file. See
:mod:`git_version_bump.config.loader` for implementation details.
"""

from .loader import ConfigError, load_config  # noqa: F401
