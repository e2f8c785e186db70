from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from staticpod_validator.models.results import RunResult


def render_table(result: RunResult, console: Console | None = None) -> None:
    console = console or Console()

    table = Table(title="StaticPod Validation")
    table.add_column("Source")
    table.add_column("Kind")
    table.add_column("Namespace")
    table.add_column("Name")
    table.add_column("Result")
    table.add_column("Violations", justify="right")

    for r in result.reports:
        table.add_row(
            escape(r.source),
            r.kind or "",
            r.namespace or "",
            escape(r.name or ""),
            "[green]admitted[/green]" if r.allowed else f"[red]{r.reason}[/red]",
            str(len(r.violations)),
        )

    console.print(table)

    rejected = [r for r in result.reports if not r.allowed]
    if rejected:
        v_table = Table(title="Violations")
        v_table.add_column("Object")
        v_table.add_column("Field")
        v_table.add_column("Type")
        v_table.add_column("Detail")
        for r in rejected:
            label = r.name or r.source
            if not r.violations:
                # bad request: no field-level detail
                v_table.add_row(escape(label), "", r.reason or "", escape(r.message or ""))
            for v in r.violations:
                v_table.add_row(escape(label), escape(v.path), v.kind.description, escape(v.detail_message()))
        console.print(v_table)

    for w in result.warnings:
        console.print(f"[yellow]warning:[/yellow] {escape(w)}")


def render_json(result: RunResult) -> str:
    data = result.model_dump(mode="json")
    return json.dumps(data, indent=2, sort_keys=True)
