"""
Command-line entry point for NetDiag.
"""

import click
from rich.console import Console
from rich.theme import Theme

from netdiag import __version__
from netdiag.config import get_config
from netdiag.diag.cli import COMMANDS
from netdiag.logging_config import setup_logging

DEFAULT_THEME = Theme({
    "label": "cyan",
    "ok": "green",
    "warn": "yellow",
    "bad": "red",
    "muted": "dim",
})


def make_console(theme: Theme = DEFAULT_THEME, color: bool = True) -> Console:
    """Console for one invocation. Theme is passed in, never read from globals."""
    return Console(theme=theme, no_color=not color, highlight=color)


@click.group()
@click.version_option(__version__, prog_name="netdiag")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also log to this file")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def main(ctx: click.Context, debug: bool, log_file: str | None, no_color: bool):
    """NetDiag - live network diagnostics.

    \b
    Commands:
        tcp       TCP connect check with latency
        ping      ICMP echo with loss/RTT statistics (root)
        discover  Common service port discovery
        diagnose  Ping + discovery + reachability verdict
    """
    config = get_config()
    setup_logging(
        level="DEBUG" if debug else config.log_level,
        log_file=log_file,
    )
    ctx.ensure_object(dict)
    ctx.obj["console"] = make_console(color=not no_color)


for command in COMMANDS:
    main.add_command(command)
