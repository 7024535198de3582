# -*- coding: utf-8 -*-
"""CLI: render saved records as narrative text, validate the text DB."""

from __future__ import annotations

import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import typer
import yaml

from .generator import compile_report
from .migrate import migrate_payload
from .textdb_store import load_textdb, load_yaml, validate_textdb
from .vocab import CORE_PATH, default_textdb

logger = logging.getLogger(__name__)

app = typer.Typer(help="Evolução fisioterapêutica: narrativas a partir de registros salvos")

PAYLOAD_ARGUMENT = typer.Argument(..., exists=True, dir_okay=False, help="JSON export of records")


def configure_logging(level: int = logging.WARNING) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)


@app.callback()
def _cli_entry(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command("render")
def render(
    payload_path: Path = PAYLOAD_ARGUMENT,
    json_output: bool = typer.Option(False, "--json", help="Emit JSON entries instead of markdown"),
    overrides: Optional[Path] = typer.Option(None, "--overrides", help="overrides.yaml with approved rewordings"),
) -> None:
    try:
        payload = json.loads(payload_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        typer.echo(f"Arquivo ilegível: {e}", err=True)
        raise typer.Exit(code=1)

    records, msg = migrate_payload(payload)
    logger.info(msg)

    try:
        db = load_textdb(CORE_PATH, overrides) if overrides else default_textdb()
    except (OSError, ValueError, yaml.YAMLError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    report = compile_report(records, db)
    if json_output:
        typer.echo(json.dumps(report.to_dicts(), ensure_ascii=False, indent=2))
        return
    typer.echo(report.to_markdown(db, issued=date.today()))


@app.command("validate-textdb")
def validate(
    core: Path = typer.Option(CORE_PATH, "--core", help="core.yaml to check"),
    overrides: Optional[Path] = typer.Option(None, "--overrides", help="overrides.yaml to merge before checking"),
) -> None:
    try:
        db = load_textdb(core, overrides)
    except (OSError, ValueError, yaml.YAMLError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    errors = validate_textdb(load_yaml(core))
    if overrides:
        errors.extend(validate_textdb(db.merged))
    if errors:
        typer.echo("\n".join(sorted(set(errors))))
        raise typer.Exit(code=1)
    typer.echo(f"OK: {core.name} validation passed.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
