"""Command group: inspect the type registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from settable.commands._base import SettableGroup

if TYPE_CHECKING:
    from settable.commands._context import AppContext


@click.group(
    cls=SettableGroup,
    examples="""\
  settable types list
  settable types show shop.Product
  settable --json types show shop.Product""",
)
def types() -> None:
    """List registered types and their settable members."""


@types.command("list")
@click.pass_obj
def list_types(app: AppContext) -> None:
    """List registered type identifiers and whether they are approved."""
    app.emit(app.service.list_types())


@types.command("show", examples="  settable types show shop.Product")
@click.argument("name")
@click.pass_obj
def show(app: AppContext, name: str) -> None:
    """Show the capability table of one registered type."""
    app.emit(app.service.describe_type(name))
