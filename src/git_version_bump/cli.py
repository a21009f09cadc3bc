"""
Command line interface for git_version_bump.

This module defines the ``main`` command group used as the entry point of
the ``git-version-bump`` command. It shows the version and release date
of the repository in the current directory, and bumps the major, minor
or patch version by tagging a new release. Exit codes are listed below;
every failure prints a one-line diagnostic to stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from git_version_bump import __version__
from git_version_bump.config.loader import ConfigError, load_config
from git_version_bump.date_resolver import DateResolver
from git_version_bump.errors import (
    CommandFailure,
    GitVersionBumpError,
    InvalidVersionComponent,
    RuntimeUnavailable,
    VersionUnobtainable,
)
from git_version_bump.tagger import Tagger
from git_version_bump.vcs.git_client import VERSION_OVERRIDE_KEY, GitClient
from git_version_bump.version_resolver import VersionResolver
from git_version_bump.version_string import bump_version


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_VERSION = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_TAG_REFUSED = 7
EXIT_INVALID_VERSION = 8


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_success(message: str) -> None:
    """Print a success message."""
    click.echo(f"✓ {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    click.echo(f"✗ {message}", err=True)


def exit_code_for(exc: GitVersionBumpError) -> int:
    """Map an error to the process exit code reported for it."""
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG_ERROR
    if isinstance(exc, (VersionUnobtainable, RuntimeUnavailable)):
        return EXIT_NO_VERSION
    if isinstance(exc, InvalidVersionComponent):
        return EXIT_INVALID_VERSION
    if isinstance(exc, CommandFailure):
        return EXIT_VCS_FAILURE
    return EXIT_GENERIC_ERROR


def fail(exc: GitVersionBumpError) -> click.exceptions.Exit:
    """Report ``exc`` and return the Exit exception to raise."""
    logger.debug("Command failed", exc_info=exc)
    print_error(str(exc))
    return click.exceptions.Exit(exit_code_for(exc))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="git-version-bump")
def main(verbose: bool) -> None:
    """Version a git repository from its release tags and tag new releases."""
    # Use force=True so handlers are reconfigured on repeated invocations
    # (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )


@main.command()
@click.option("--lite-tags", is_flag=True, help="Consider lightweight tags as well as annotated ones.")
@click.option("--commit-date", is_flag=True, help="Use the commit-date scheme instead of tags.")
@click.option(
    "--local/--no-local",
    default=True,
    help="Version the current directory (default) or the checkout this tool is installed from.",
)
def show(lite_tags: bool, commit_date: bool, local: bool) -> None:
    """Print the current version."""
    # Without --local there is no calling library; version the checkout or
    # installed distribution this command itself comes from.
    resolver = VersionResolver(caller_file=None if local else Path(__file__))
    try:
        if commit_date:
            version = resolver.commit_date_version(use_local_dir=local)
        else:
            version = resolver.resolve(use_local_dir=local, include_lite_tags=lite_tags)
    except GitVersionBumpError as exc:
        raise fail(exc)
    click.echo(version)


@main.command()
def date() -> None:
    """Print the release date."""
    try:
        release_date = DateResolver().resolve(use_local_dir=True)
    except GitVersionBumpError as exc:
        raise fail(exc)
    click.echo(release_date)


def _bump(level: str, notes: Optional[bool], lite_tags: Optional[bool], dry_run: bool) -> None:
    repo_root = Path.cwd()
    resolver = VersionResolver()
    try:
        config = load_config(repo_root)
        if notes is None:
            notes = config["notes"]
        if lite_tags is None:
            lite_tags = config["include_lite_tags"]

        current = resolver.resolve(use_local_dir=True, include_lite_tags=lite_tags)
        new_version = bump_version(current, level)
        logger.debug("Bumping %s version: %s -> %s", level, current, new_version)

        tagger = Tagger(repo_root, remote=config["remote"], editor=config["editor"])
        tagged = tagger.tag_release(
            new_version,
            with_release_notes=notes,
            include_lite_tags=lite_tags,
            dry_run=dry_run,
        )
        if not tagged:
            raise click.exceptions.Exit(EXIT_TAG_REFUSED)
        if dry_run:
            return

        resolver.clear_cache()
        print_success(f"Version is now {resolver.resolve(use_local_dir=True, include_lite_tags=lite_tags)}")
    except GitVersionBumpError as exc:
        raise fail(exc)


def _bump_command(level: str, summary: str) -> click.Command:
    @click.option("--notes/--no-notes", default=None, help="Edit release notes for the new tag.")
    @click.option("--lite-tags/--no-lite-tags", default=None, help="Consider lightweight tags as well as annotated ones.")
    @click.option("--dry-run", is_flag=True, help="Show what would be tagged without changing anything.")
    def command(notes: Optional[bool], lite_tags: Optional[bool], dry_run: bool) -> None:
        _bump(level, notes, lite_tags, dry_run)

    command.__doc__ = summary
    return main.command(name=level)(command)


bump_major = _bump_command("major", "Bump the major version (x.y.z -> x+1.0.0).")
bump_minor = _bump_command("minor", "Bump the minor version (x.y.z -> x.y+1.0).")
bump_patch = _bump_command("patch", "Bump the patch version (x.y.z -> x.y.z+1).")


@main.command()
@click.argument("version")
def pin(version: str) -> None:
    """Pin the version to VERSION without creating a tag."""
    try:
        GitClient(Path.cwd()).set_config(VERSION_OVERRIDE_KEY, version)
    except GitVersionBumpError as exc:
        raise fail(exc)
    print_success(f"Version pinned to {version}")


@main.command()
def unpin() -> None:
    """Remove a pinned version."""
    try:
        GitClient(Path.cwd()).unset_config(VERSION_OVERRIDE_KEY)
    except GitVersionBumpError as exc:
        raise fail(exc)
    print_success("Version override removed")
