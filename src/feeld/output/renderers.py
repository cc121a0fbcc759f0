"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`;
unknown ops fall through to a generic key-value renderer. User data (rule
strings such as ``matches[password]``, HTML) is always wrapped in
:class:`~rich.text.Text` so rich never reads it as markup.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from feeld.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from feeld.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console", bool], None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    renderer = _OP_RENDERERS.get(result.op)
    if result.ok:
        (renderer or _render_generic)(result, console, verbose)
    elif result.op == "validate_form" and result.data:
        _render_validation(result, console, verbose)
    else:
        _render_error(result, console, verbose)

    for warning in result.warnings:
        console.print(Text.assemble(("  warning: ", "feeld.warning"), warning))

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: the payload only, or one error line."""
    if result.op == "render_form" and result.ok:
        return "\n".join(result.data["fields"].values())
    if result.op == "script_data" and result.ok:
        return json.dumps(result.data["fields"])
    if result.op == "translate_rules" and result.ok:
        return f"{result.data['server_rules']}\n{result.data['client_rules']}"
    if result.op == "validate_form" and result.data:
        return "\n".join(err["message"] for err in result.data.get("errors", []))
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="feeld.ok") if result.ok else Text("FAILED", style="feeld.error")
    console.print(Text.assemble(label, (f"  {result.op}", "feeld.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value pair."""
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"))
    console.print(Text.assemble((f"  {key}: ", "feeld.key"), str(value)), soft_wrap=True)


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        console.print(Text(f"    {key}: {value}"))


def _table(*columns: tuple[str, str | None]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for title, style in columns:
        table.add_column(title, style=style)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, verbose: bool) -> None:
    err = result.error
    code = f" [{err.code}]" if err else ""
    msg = err.message if err else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "feeld.error"), (f"  {result.op}", "feeld.op"), f"{code}: {msg}"),
        soft_wrap=True,
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Rule renderers ────────────────────────────────────────────────────


def _render_translation(result: ServiceResult, console: Console, verbose: bool) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "spec", d["spec"])
    for dialect in ("server", "client"):
        console.print(
            Text.assemble(
                (f"  {dialect}: ", "feeld.key"),
                (d[f"{dialect}_rules"], f"feeld.{dialect}"),
            ),
            soft_wrap=True,
        )
    if verbose and d["constraints"]:
        table = _table(
            ("Kind", "feeld.kind"), ("Parameter", None), ("Server", None), ("Client", None)
        )
        for item in d["constraints"]:
            param = "" if item["parameter"] is None else str(item["parameter"])
            table.add_row(
                Text(item["kind"]), Text(param), Text(item["server"]), Text(item["client"])
            )
        console.print(table)


def _render_catalog(result: ServiceResult, console: Console, verbose: bool) -> None:
    table = _table(
        ("Kind", "feeld.kind"),
        ("Server", "feeld.server"),
        ("Client", "feeld.client"),
        ("Parameter", None),
    )
    for item in result.data["items"]:
        parameter = item["parameter"]
        if item["registry_enforced"]:
            parameter += " (cross-field)"
        table.add_row(
            Text(item["kind"]), Text(item["server"]), Text(item["client"]), Text(parameter)
        )
    console.print(table)
    console.print(f"\n{result.data['count']} constraints")


# ── Form renderers ────────────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, verbose: bool) -> None:
    _status_line(console, result)
    _field(console, "form", result.data["form"])
    columns: list[tuple[str, str | None]] = [
        ("Name", "feeld.field"),
        ("Label", None),
        ("Kind", "feeld.kind"),
        ("Server", "feeld.server"),
        ("Client", "feeld.client"),
    ]
    if verbose:
        columns.append(("Sanitize", "dim"))
    table = _table(*columns)
    for item in result.data["fields"]:
        row = [
            item["name"],
            item["label"],
            item["kind"],
            item["server_rules"],
            item["client_rules"],
        ]
        if verbose:
            row.append(item["sanitize"])
        table.add_row(*(Text(cell) for cell in row))
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_markup(result: ServiceResult, console: Console, verbose: bool) -> None:
    for name, markup in result.data["fields"].items():
        console.print(Text(f"<!-- {name} -->", style="dim"))
        console.print(Text(markup), soft_wrap=True)


def _render_script_data(result: ServiceResult, console: Console, verbose: bool) -> None:
    console.print(Text(json.dumps(result.data["fields"], indent=2)), soft_wrap=True)


def _render_validation(result: ServiceResult, console: Console, verbose: bool) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "form", d["form"])
    errors = d.get("errors", [])
    if errors:
        table = _table(("Field", "feeld.field"), ("Rule", "feeld.kind"), ("Message", None))
        for err in errors:
            table.add_row(Text(err["field"]), Text(err["rule"]), Text(err["message"]))
        console.print(table)
    if verbose:
        _field(console, "values", d.get("values", {}))
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, verbose: bool) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "translate_rules": _render_translation,
    "rule_catalog": _render_catalog,
    "check_form": _render_check,
    "render_form": _render_markup,
    "script_data": _render_script_data,
    "validate_form": _render_validation,
}
