"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from settable.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from settable.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("id") or item.get("type") or "") for item in items)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult, suffix: str = "") -> None:
    """Print the OK status line."""
    console.print(
        Text.assemble(("OK", "settable.ok"), (f"  {result.op}", "settable.op"), suffix)
    )


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    style = "settable.id" if key in ("id", "type") else ""
    console.print(Text.assemble((f"  {key}: ", "settable.key"), (str(value), style)))


def _approved(flag: bool) -> Text:
    if flag:
        return Text("yes", style="settable.approved")
    return Text("no", style="settable.denied")


def _outcome_table(outcomes: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Key", style="settable.id", no_wrap=True)
    table.add_column("Status")
    table.add_column("Via / Kind")
    if verbose:
        table.add_column("Detail")
    # request keys and details are rendered literally
    for outcome in outcomes:
        status = str(outcome.get("status", ""))
        via = outcome.get("kind") or outcome.get("via") or ""
        row: list[Any] = [
            Text(str(outcome.get("key", ""))),
            Text(status, style=style_for_status(status)),
            str(via),
        ]
        if verbose:
            row.append(Text(str(outcome.get("detail", ""))))
        table.add_row(*row)
    return table


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text.assemble(
            ("ERROR", "settable.error"), (f"  {result.op}", "settable.op"), " — ", msg
        )
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Binding renderers ─────────────────────────────────────────────────


def _render_record(console: Console, record: dict[str, Any], *, verbose: bool) -> None:
    _field(console, "type", record.get("type", ""))
    counts = (
        f"{record.get('applied', 0)} applied, "
        f"{record.get('skipped', 0)} skipped, "
        f"{record.get('failed', 0)} failed"
    )
    _field(console, "keys", counts)
    outcomes = record.get("outcomes", [])
    if outcomes:
        console.print(_outcome_table(outcomes, verbose=verbose))
    state = record.get("state", {})
    if verbose and state:
        console.print(Text("  state:", style="dim"))
        for name, value in state.items():
            console.print(Text(f"    {name} = {value}"))


def _render_bind(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _render_record(console, result.data, verbose=verbose)


def _render_bind_batch(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result, f"  ({result.data.get('count', 0)} records)")
    for i, record in enumerate(result.data.get("items", [])):
        console.print()
        console.print(Text(f"  [{i}]", style="settable.key"))
        _render_record(console, record, verbose=verbose)


def _render_list_types(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result, f"  ({result.data.get('count', 0)} types)")
    items = result.data.get("items", [])
    if not items:
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="settable.id", no_wrap=True)
    table.add_column("Approved")
    table.add_column("Fields", justify="right")
    table.add_column("Accessors", justify="right")
    if verbose:
        table.add_column("Class", style="dim")
    for item in items:
        row: list[Any] = [
            str(item.get("id", "")),
            _approved(bool(item.get("approved"))),
            str(item.get("fields", 0)),
            str(item.get("accessors", 0)),
        ]
        if verbose:
            row.append(str(item.get("type", "")))
        table.add_row(*row)
    console.print(table)


def _render_describe_type(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "id", d.get("id", ""))
    approved = _approved(bool(d.get("approved")))
    console.print(Text.assemble(("  approved: ", "settable.key"), approved))
    members = d.get("members", [])
    if members:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Key", style="settable.id", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("Approved")
        for member in members:
            table.add_row(
                str(member.get("key", "")),
                str(member.get("kind", "")),
                str(member.get("name", "")),
                str(member.get("declared", "")),
                _approved(bool(member.get("approved"))),
            )
        console.print(table)
    ambiguous = d.get("ambiguous", [])
    if ambiguous:
        console.print(
            Text.assemble(("  ambiguous: ", "settable.warning"), ", ".join(ambiguous))
        )


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "bind": _render_bind,
    "bind_batch": _render_bind_batch,
    "list_types": _render_list_types,
    "describe_type": _render_describe_type,
}
