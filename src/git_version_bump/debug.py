"""
Debug logging controlled by the ``GVB_DEBUG`` environment variable.

Library users cannot pass ``--verbose`` to code that resolves a version
during their build, so setting ``GVB_DEBUG`` sends every resolution
decision and git invocation to stderr. Only the variable's presence
matters; an empty value counts.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional


DEBUG_ENV_VAR = "GVB_DEBUG"
PACKAGE_LOGGER = "git_version_bump"

_handler: Optional[logging.Handler] = None


def debug_requested(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return DEBUG_ENV_VAR in environ


def enable_debug_logging(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Attach a stderr handler to the package logger if debugging is requested.

    Safe to call repeatedly; the handler is only added once. Returns True
    when debug logging is active.
    """
    global _handler
    if not debug_requested(environ):
        return _handler is not None
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter("GVB %(name)s: %(message)s"))
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        package_logger.addHandler(_handler)
        package_logger.setLevel(logging.DEBUG)
    return True
