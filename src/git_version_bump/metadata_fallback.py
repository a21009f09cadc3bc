"""
Version lookup from installed distribution metadata.

When the code asking for a version is not running from a git checkout
(for example after ``pip install``), the only remaining source of truth
is the metadata of the distribution that installed the caller's file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from importlib import metadata
from pathlib import Path
from typing import Iterable, Optional


logger = logging.getLogger(__name__)

_METADATA_FILES = ("METADATA", "PKG-INFO")


@dataclass
class PackageInfo:
    """Version information for an installed distribution."""

    name: str
    version: str
    release_date: Optional[date] = None


def _release_date(dist: metadata.Distribution) -> Optional[date]:
    for entry in dist.files or ():
        if entry.name in _METADATA_FILES:
            path = Path(dist.locate_file(entry))
            try:
                return datetime.fromtimestamp(path.stat().st_mtime).date()
            except OSError:
                return None
    return None


class PackageMetadataFallback:
    """Find the installed distribution that owns a source file."""

    def __init__(self, distributions: Optional[Iterable[metadata.Distribution]] = None) -> None:
        self._distributions = distributions

    def _candidates(self) -> Iterable[metadata.Distribution]:
        if self._distributions is not None:
            return self._distributions
        return metadata.distributions()

    def lookup(self, caller_file: Optional[Path]) -> Optional[PackageInfo]:
        """Return version information for the distribution owning ``caller_file``.

        Returns None if the file does not belong to any installed
        distribution.
        """
        if caller_file is None:
            return None
        target = Path(caller_file).resolve()
        for dist in self._candidates():
            for entry in dist.files or ():
                try:
                    located = Path(dist.locate_file(entry)).resolve()
                except OSError:
                    continue
                if located == target:
                    name = dist.metadata["Name"]
                    logger.debug("%s belongs to distribution %s %s", target, name, dist.version)
                    return PackageInfo(
                        name=name, version=dist.version, release_date=_release_date(dist)
                    )
        logger.debug("%s does not belong to any installed distribution", target)
        return None
