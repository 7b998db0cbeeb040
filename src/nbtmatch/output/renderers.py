"""Human-readable rendering of ServiceResult, one renderer per operation.

Renderers draw onto a StringIO-backed console from
:func:`~nbtmatch.output.console.create_console`; :func:`render_result`
returns the captured text. Operations without a dedicated renderer are
shown as plain ``key: value`` lines. User-controlled strings (keys,
expression sources, messages) are always wrapped in ``Text`` so brackets
in them are never read as console markup.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from nbtmatch.output.console import create_console, get_output, style_for_value

if TYPE_CHECKING:
    from rich.console import Console

    from nbtmatch.services.result import ServiceResult

    Renderer = Callable[[ServiceResult, Console], None]


# ── Entry points ──────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* for a terminal.

    With *verbose*, error details and the telemetry span tree are appended.
    Colour codes are dropped automatically when the console is not a TTY.
    """
    console = create_console()
    if result.ok:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    if verbose and result.meta:
        _render_meta(console, result.meta)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """The bare value a script would want from ``--quiet``."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    quiet = _QUIET_RENDERERS.get(result.op)
    return quiet(result.data) if quiet else f"OK: {result.op}"


def _bool_word(value: Any) -> str:
    return "true" if value else "false"


_QUIET_RENDERERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "match": lambda d: "\n".join(_bool_word(row["matches"]) for row in d.get("results", [])),
    "evaluate_expression": lambda d: _bool_word(d.get("result")),
    "encode": lambda d: str(d.get("hex", "")),
    "preview": lambda d: str(d.get("snbt", "")),
    "parse_expression": lambda d: str(d.get("canonical", "")),
}


# ── Building blocks ───────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "nbt.ok"), (f"  {result.op}", "nbt.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """``key: value`` with containers shown as compact JSON."""
    if isinstance(value, (dict, list)):
        shown = _json.dumps(value, separators=(",", ":"))
    else:
        shown = str(value)
    console.print(Text.assemble((f"  {key}: ", "nbt.key"), shown))


def _timing_style(duration_ms: float) -> str:
    if duration_ms > 1000:
        return "bold red"
    if duration_ms > 100:
        return "yellow"
    return "dim"


def _add_span(tree: Tree, span: dict[str, Any]) -> None:
    duration = span.get("duration_ms", 0.0)
    label = Text.assemble((f"{duration:>8.2f}ms", _timing_style(duration)), "  ", span.get("name", "?"))
    annotations = span.get("annotations") or {}
    if annotations:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")")
    branch = tree.add(label)
    for child in span.get("children", []):
        _add_span(branch, child)


def _render_meta(console: Console, meta: dict[str, Any]) -> None:
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in meta.items():
        if key == "telemetry":
            spans = Tree(Text("    telemetry", style="dim"))
            _add_span(spans, value)
            console.print(spans)
        else:
            console.print(Text(f"    {key}: {value}"))


def _add_json_branch(tree: Tree, label: str, value: Any) -> None:
    """Attach one JSON value (tag tree view) under *tree*."""
    if isinstance(value, dict):
        branch = tree.add(Text(f"{label} {{}}", style="nbt.container"))
        for key, child in value.items():
            _add_json_branch(branch, key, child)
    elif isinstance(value, list):
        branch = tree.add(Text(f"{label} [{len(value)}]", style="nbt.container"))
        for index, child in enumerate(value):
            _add_json_branch(branch, f"[{index}]", child)
    else:
        text = Text(f"{label}: ")
        text.append(_json.dumps(value), style=style_for_value(value))
        tree.add(text)


def _tag_tree(title: str, value: dict[str, Any]) -> Tree:
    tree = Tree(Text(title, style="bold"))
    for key, child in value.items():
        _add_json_branch(tree, key, child)
    return tree


def _ast_tree(tree: Tree, node: dict[str, Any]) -> None:
    kind = node.get("kind", "?")
    if kind == "reference":
        path = "".join(f"[{seg}]" for seg in node.get("path", []))
        tree.add(Text(f"ref {node.get('name')}{path}", style="nbt.op"))
    elif kind == "literal":
        value = node.get("value")
        text = Text("literal ")
        text.append(_json.dumps(value), style=style_for_value(value))
        tree.add(text)
    elif kind == "range":
        branch = tree.add(Text(f"range {node.get('range')}", style="nbt.number"))
        _ast_tree(branch, node["target"])
    elif kind == "comparison":
        branch = tree.add(Text(f"compare {node.get('op')}", style="bold"))
        _ast_tree(branch, node["left"])
        _ast_tree(branch, node["right"])
    elif kind == "not":
        branch = tree.add(Text("not", style="bold"))
        _ast_tree(branch, node["child"])
    else:
        branch = tree.add(Text(f"{kind} {node.get('op', '')}".rstrip(), style="bold"))
        for child in node.get("children", []):
            _ast_tree(branch, child)


# ── Failures ──────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "nbt.error"), (f"  {result.op}", "nbt.op"), " - ", msg))
    if err is None:
        return

    for failure in err.detail.get("failures", []):
        line = Text(f"  conditions[{failure['index']}] ", style="nbt.error")
        line.append(f"{failure['source']!r}: {failure['message']}")
        console.print(line)
    if verbose and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Per-operation renderers ───────────────────────────────────────────


def _render_match(result: ServiceResult, console: Console) -> None:
    """One table row per instance."""
    d = result.data
    _status_line(console, result)
    _field(console, "matched", f"{d['matched']}/{d['count']}")

    table = Table(show_header=True, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("Item")
    table.add_column("Match")
    for row in d.get("results", []):
        verdict = Text("yes", style="nbt.match") if row["matches"] else Text("no", style="nbt.miss")
        table.add_row(str(row["index"]), Text(str(row["item"])), verdict)
    console.print(table)


def _render_preview(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    console.print(_tag_tree("tag", result.data.get("preview", {})))
    _field(console, "snbt", result.data.get("snbt", ""))


def _render_condition(result: ServiceResult, console: Console) -> None:
    """Canonical condition document, shared by ``normalize`` and ``decode``."""
    _status_line(console, result)
    condition = result.data.get("condition", {})
    if not condition:
        console.print("  (empty condition)")
    for key, value in condition.items():
        if isinstance(value, dict):
            console.print(_tag_tree(key, value))
        elif isinstance(value, list):
            console.print(Text(f"  {key}:", style="nbt.key"))
            for source in value:
                console.print(Text(f"    - {source}"))
        else:
            _field(console, key, value)


def _render_expression(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    _field(console, "canonical", result.data.get("canonical", ""))
    tree = Tree(Text("ast", style="bold"))
    _ast_tree(tree, result.data.get("ast", {}))
    console.print(tree)


def _render_evaluation(result: ServiceResult, console: Console) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "value", d.get("value"))
    verdict = Text("pass", style="nbt.match") if d.get("result") else Text("fail", style="nbt.miss")
    console.print(Text.assemble(("  result: ", "nbt.key"), verdict))


def _render_wire(result: ServiceResult, console: Console) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "size", f"{d.get('size')} bytes")
    _field(console, "hex", d.get("hex", ""))


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Renderer] = {
    "match": _render_match,
    "preview": _render_preview,
    "normalize": _render_condition,
    "decode": _render_condition,
    "parse_expression": _render_expression,
    "evaluate_expression": _render_evaluation,
    "encode": _render_wire,
}
