"""bugsmith CLI"""

import click

from bugsmith import __version__
from bugsmith.cli.cache import cache
from bugsmith.cli.clone import clone, env

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="bugsmith")
@click.pass_context
def cli(ctx):
    """
    bugsmith Command Line Interface (CLI).
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(clone))
cli.add_command(add_debug_option(env))
cli.add_command(add_debug_option(cache))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
