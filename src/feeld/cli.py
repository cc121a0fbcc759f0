"""The ``feeld`` command: global flags, settings and subcommand groups."""

from __future__ import annotations

from typing import Any

import click

from feeld import __version__
from feeld.commands import register_commands
from feeld.commands._base import FeeldGroup
from feeld.commands._context import AppContext
from feeld.config.settings import FeeldSettings

_EXAMPLES = """\
  feeld rules translate 'required|min_len,5'
  feeld form check signup.yaml
  feeld -q form render signup.yaml email
  feeld --json form validate signup.yaml --data submitted.json
  feeld --no-plugins form check signup.yaml"""


@click.group(cls=FeeldGroup, invoke_without_command=True, examples=_EXAMPLES)
@click.version_option(version=__version__, prog_name="feeld")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the payload.")
@click.option("-v", "--verbose", is_flag=True, help="More detail and debug logging.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("--no-plugins", is_flag=True, help="Skip plugin discovery.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Use this config file instead of searching for one.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, no_plugins: bool, **flags: Any) -> None:
    """Declare form fields once, then render and validate them."""
    if no_plugins:
        flags["plugins"] = {"enabled": False}
    ctx.obj = AppContext(FeeldSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
