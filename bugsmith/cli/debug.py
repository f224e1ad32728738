import click

from .utils.logging import configure_logging


def _set_debug(ctx, param, value: bool) -> bool:
    """Callback for --debug: once switched on at any level it stays on."""
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)

    enabled = bool(value) or root_ctx.obj.get("DEBUG", False)
    root_ctx.obj["DEBUG"] = enabled

    configure_logging(enabled)
    return enabled


def add_debug_option(cmd: click.Command) -> click.Command:
    """Add --debug/--no-debug to an existing click command or group."""
    if not any(param.name == "debug" for param in cmd.params):
        cmd.params.insert(
            0,
            click.Option(
                ["--debug/--no-debug"],
                is_eager=True,
                expose_value=False,
                callback=_set_debug,
                help="Enable debug mode",
            ),
        )
    return cmd
