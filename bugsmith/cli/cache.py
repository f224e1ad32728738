"""CLI commands for repository cache inspection"""

import json

import click

from bugsmith.cli.utils.logging import logger
from bugsmith.git import describe_cache

from .debug import add_debug_option


@click.group(name="cache")
def cache():
    """Inspect the repository cache."""
    pass


@add_debug_option
@cache.command("describe")
@click.option("--json", "as_json", is_flag=True, help="Print entries as JSON.")
def describe(as_json: bool):
    """List cached repositories and placeholders."""
    entries = describe_cache()

    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return

    if not entries:
        logger.info("Cache is empty")
        return

    for entry in entries:
        if entry["kind"] == "checkout":
            head = entry["head"][:7] if entry["head"] != "unknown" else "unknown"
            click.echo(f"{entry['name']:<40} checkout   {head}  {entry['url']}")
        elif entry["kind"] == "serverless":
            click.echo(f"{entry['name']:<40} serverless {entry['repo']}")
        else:
            click.echo(f"{entry['name']:<40} empty")
        logger.debug(f"  {entry['path']}")
