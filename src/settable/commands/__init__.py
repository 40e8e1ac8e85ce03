"""Subcommand modules for settable.

Provides register_commands() which uses deferred imports to keep
``settable --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``types`` group and the standalone ``bind`` command."""
    from settable.commands.bind import bind
    from settable.commands.types import types

    cli.add_command(bind)
    cli.add_command(types)
