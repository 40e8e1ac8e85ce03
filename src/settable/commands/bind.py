"""Command: bind a string map onto a registered type."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING, Any

import click

from settable.commands._base import SettableCommand

if TYPE_CHECKING:
    from settable.commands._context import AppContext


def parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` arguments into a request map (last one wins)."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise click.BadParameter(msg, param_hint="PAIRS")
        params[key] = value
    return params


def load_records(stream: IO[str]) -> list[dict[str, Any]]:
    """Read one flat JSON object, or a list of them, from *stream*."""
    try:
        payload = json.load(stream)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON input: {exc}"
        raise click.ClickException(msg) from exc

    records = payload if isinstance(payload, list) else [payload]
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            msg = f"Record {i} is not a JSON object"
            raise click.ClickException(msg)
        nested = [k for k, v in record.items() if isinstance(v, (dict, list))]
        if nested:
            msg = f"Record {i} has nested values for: {', '.join(nested)}"
            raise click.ClickException(msg)
    return records


@click.command(
    cls=SettableCommand,
    examples="""\
  settable bind class=shop.Product name=Lamp price=19.5 listed=yes
  settable bind --namespace shop class=Product released=2021-06-05
  settable bind --type shop.Product name=Lamp
  settable --json bind --input records.json""",
)
@click.argument("pairs", nargs=-1)
@click.option(
    "--type",
    "default_type",
    default=None,
    help="Fallback type identifier when the request names none (skips the approval check).",
)
@click.option("--namespace", default=None, help="Namespace for unqualified 'class' names.")
@click.option(
    "-i",
    "--input",
    "input_file",
    type=click.File("r"),
    default=None,
    help="JSON file with one flat object or a list of them ('-' for stdin).",
)
@click.pass_obj
def bind(
    app: AppContext,
    pairs: tuple[str, ...],
    default_type: str | None,
    namespace: str | None,
    input_file: IO[str] | None,
) -> None:
    """Instantiate a type from KEY=VALUE pairs and report each key's outcome.

    Only members marked user_settable are bound. Rejected keys are
    reported as warnings and never stop the rest of the request.
    """
    from settable.services.bind import stringify_params

    overrides = parse_pairs(pairs)
    fallback = default_type or app.settings.binder.default_type

    if input_file is None:
        app.emit(
            app.service.bind(overrides, default_type=fallback, default_namespace=namespace)
        )
        return

    records = [stringify_params(r) | overrides for r in load_records(input_file)]
    if len(records) == 1:
        app.emit(
            app.service.bind(records[0], default_type=fallback, default_namespace=namespace)
        )
    else:
        app.emit(
            app.service.bind_batch(records, default_type=fallback, default_namespace=namespace)
        )
