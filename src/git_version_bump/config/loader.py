"""
Configuration loader for git_version_bump.

Release settings can be kept in an optional JSON file named
``.git-version-bump.json`` at the repository root. A missing file means
defaults everywhere. A file that cannot be read, is not valid JSON, or
has settings of the wrong type raises a :class:`ConfigError`.

Version and date overrides are not stored here: they live in the
repository's git configuration (``versionBump.versionOverride`` and
``versionBump.dateOverride``) so that they can be set without editing a
tracked file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from git_version_bump.errors import GitVersionBumpError


logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".git-version-bump.json"

DEFAULTS: Dict[str, Any] = {
    "remote": None,
    "editor": None,
    "include_lite_tags": False,
    "notes": False,
}

_OPTIONAL_STRINGS = ("remote", "editor")
_BOOLEANS = ("include_lite_tags", "notes")


class ConfigError(GitVersionBumpError):
    """Raised when the configuration file is unreadable or invalid."""

    pass


def load_config(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load release settings for the repository at ``repo_root``.

    Args:
        repo_root: Directory holding the configuration file. Defaults to the
                   current directory.

    Returns:
        A dictionary with the keys:
        - remote (str or None): Remote to push to; git's default when None
        - editor (str or None): Release-notes editor when $EDITOR is unset
        - include_lite_tags (bool): Consider lightweight tags
        - notes (bool): Edit release notes when bumping

    Raises:
        ConfigError: If the file exists but is malformed or invalid.
    """
    config = dict(DEFAULTS)
    config_path = (repo_root or Path.cwd()) / CONFIG_FILE_NAME
    if not config_path.exists():
        logger.debug("No configuration file at %s; using defaults", config_path)
        return config

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    unknown = sorted(set(data) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in _OPTIONAL_STRINGS:
        if key in data and data[key] is not None and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    for key in _BOOLEANS:
        if key in data and not isinstance(data[key], bool):
            raise ConfigError(f"'{key}' must be true or false")

    config.update(data)
    logger.debug("Loaded configuration from %s: %s", config_path, config)
    return config
