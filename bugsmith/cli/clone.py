"""cli commands to acquire repositories and inspect the environment"""

import sys

import click

from bugsmith.cli.utils.logging import logger
from bugsmith.config import get_git_settings
from bugsmith.git import (
    BugsmithError,
    EnvironmentSnapshot,
    classify_environment,
    clone_repo,
)
from bugsmith.git.cache import cache_root


@click.command(name="clone")
@click.argument("repo", type=str)
def clone(repo: str):
    """Clone or update REPO (owner/name) into the local cache.

    Prints the path of the cache entry. In serverless environments the entry
    only holds a placeholder marker.

    Example:

      bugsmith clone octocat/Hello-World
    """
    try:
        path = clone_repo(repo)
    except BugsmithError as e:
        logger.error(str(e))
        sys.exit(1)

    click.echo(str(path))


@click.command(name="env")
def env():
    """Show whether this environment can run real git checkouts."""
    snapshot = EnvironmentSnapshot.from_os()
    settings = get_git_settings(env=snapshot.env)
    profile = classify_environment(snapshot, settings)

    mode = "serverless" if profile.is_degraded else "git"
    click.echo(f"mode: {mode}")
    click.echo(f"reason: {profile.reason}")
    click.echo(f"cache root: {cache_root(profile.is_degraded, snapshot)}")
