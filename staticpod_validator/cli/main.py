from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.logging import RichHandler

from staticpod_validator.core.admission import review
from staticpod_validator.core.exceptions import ParseError
from staticpod_validator.core.handler import HandlerConfig, StaticPodHandler
from staticpod_validator.core.orchestrator import ValidationConfig, orchestrate
from staticpod_validator.output.render import render_json, render_table
from staticpod_validator.parsers.yaml_parser import load_documents


app = typer.Typer(add_completion=False, help="StaticPod admission validator CLI")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.command("validate")
def validate_cmd(
    files: List[Path] = typer.Argument(..., help="StaticPod YAML/JSON manifest files"),
    output: str = typer.Option(
        "table",
        "--output",
        case_sensitive=False,
        help="Output format: table|json",
    ),
    allow_invalid_label_value: bool = typer.Option(
        False,
        "--allow-invalid-label-value/--no-allow-invalid-label-value",
        help="Skip label value checks on the pod template",
    ),
    allow_requests_above_limits: bool = typer.Option(
        False,
        "--allow-requests-above-limits/--no-allow-requests-above-limits",
        help="Do not reject resource requests greater than limits",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
):
    """Validate StaticPod manifests as they would be checked on creation."""
    _setup_logging(log_level)
    fmt = output.lower()
    if fmt not in ("table", "json"):
        typer.echo("Unknown output format. Use table|json.", err=True)
        raise typer.Exit(code=2)

    try:
        cfg = ValidationConfig(
            allow_invalid_label_value=allow_invalid_label_value,
            allow_requests_above_limits=allow_requests_above_limits,
        )
        result = orchestrate([str(p) for p in files], cfg)
    except ParseError as exc:
        typer.echo(f"Fatal error: {exc}", err=True)
        raise typer.Exit(code=1)

    if fmt == "table":
        render_table(result)
    else:
        typer.echo(render_json(result))

    raise typer.Exit(code=0 if result.all_allowed else 1)


@app.command("review")
def review_cmd(
    file: Path = typer.Argument(..., help="AdmissionReview request (JSON or YAML)"),
    skip_previous_on_update: bool = typer.Option(
        False,
        "--skip-previous-on-update/--validate-previous-on-update",
        help="On UPDATE, only validate the incoming object",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
):
    """Answer an AdmissionReview request read from a file."""
    _setup_logging(log_level)
    try:
        docs = [d for d in load_documents(file) if d is not None]
    except ParseError as exc:
        typer.echo(f"Fatal error: {exc}", err=True)
        raise typer.Exit(code=1)
    if len(docs) != 1 or not isinstance(docs[0], dict):
        typer.echo("Fatal error: expected exactly one AdmissionReview object", err=True)
        raise typer.Exit(code=1)

    handler = StaticPodHandler(HandlerConfig(validate_previous_on_update=not skip_previous_on_update))
    typer.echo(json.dumps(review(docs[0], handler), indent=2, sort_keys=True))
    raise typer.Exit(code=0)


if __name__ == "__main__":  # pragma: no cover
    app()
