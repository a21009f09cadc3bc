"""
Helpers for working with resolved version strings.

A version string looks like ``major.minor.patch[.internal][.dirty...]``.
The first three components are exposed as integers; everything after
them is the internal revision and is treated as opaque text.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from git_version_bump.errors import InvalidVersionComponent


ENOTAG = "0.0.0.1.ENOTAG"
ENOCOMMITS = "0.0.0.1.ENOCOMMITS"

BUMP_LEVELS = ("major", "minor", "patch")

_NUMERIC_RE = re.compile(r"^[0-9]+$")


def dirty_suffix(now: Optional[datetime] = None) -> str:
    """Return the suffix appended to versions built from a dirty tree.

    The timestamp has one-second resolution so that successive dirty builds
    sort after the last release and after each other.
    """
    now = now or datetime.now()
    return now.strftime("1.dirty.%Y%m%d.%H%M%S")


def _component(version: str, index: int) -> int:
    parts = version.split(".")
    value = parts[index] if index < len(parts) else ""
    if not _NUMERIC_RE.match(value):
        raise InvalidVersionComponent(value, version)
    return int(value)


def major_version(version: str) -> int:
    return _component(version, 0)


def minor_version(version: str) -> int:
    return _component(version, 1)


def patch_version(version: str) -> int:
    return _component(version, 2)


def internal_revision(version: str) -> str:
    """Return everything after the patch component, or an empty string."""
    parts = version.split(".", 3)
    return parts[3] if len(parts) > 3 else ""


def bump_version(version: str, level: str) -> str:
    """Return the next release version for ``level``.

    The selected component is incremented and all lower components are
    reset to zero; internal revisions are dropped.

    Raises
    ------
    ValueError
        If ``level`` is not one of ``major``, ``minor`` or ``patch``.
    InvalidVersionComponent
        If a component needed for the computation is not numeric.
    """
    if level not in BUMP_LEVELS:
        raise ValueError(f"unknown bump level {level!r}; expected one of {', '.join(BUMP_LEVELS)}")
    major = major_version(version)
    if level == "major":
        return f"{major + 1}.0.0"
    minor = minor_version(version)
    if level == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch_version(version) + 1}"
