#!/usr/bin/env python
"""
Thin wrapper script to invoke the git_version_bump CLI.

Running ``python gvb.py`` is equivalent to running the
``git-version-bump`` console script installed via ``pyproject.toml``.
"""

from git_version_bump.cli import main


if __name__ == "__main__":
    main(prog_name="git-version-bump")
