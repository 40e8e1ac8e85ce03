"""``settable`` entry point: global output/config flags plus subcommands."""

from __future__ import annotations

import click

from settable import __version__
from settable.commands import register_commands
from settable.commands._base import SettableGroup
from settable.commands._context import AppContext
from settable.config.settings import SettableSettings


@click.group(
    cls=SettableGroup,
    invoke_without_command=True,
    examples="""\
  settable types list
  settable bind class=shop.Product name=Lamp price=19.5
  settable --json -c ./settable.toml bind --input records.json""",
)
@click.version_option(version=__version__, prog_name="settable")
@click.option("-c", "--config", "config_path", default=None, help="Use this settable.toml.")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only ids/status; hide rejected-key logs.")
@click.option("-v", "--verbose", is_flag=True, help="Show instance state and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """settable: bind untrusted string maps onto whitelisted types."""
    ctx.obj = AppContext(SettableSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
