# Copyright (c) Syntropy Systems
"""Export command - write the ledger snapshot to JSON."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from skillforge.cli.common import EXIT_INPUT_ERROR, console, handle_errors, open_project
from skillforge.config import get_exports_dir
from skillforge.forge import write_snapshot


def export(
    output: Optional[Path] = typer.Argument(
        None,
        help="Output file (.json, default: .forge/exports/dashboard.json)",
    ),
) -> None:
    """Export a read-only snapshot of tracked skills and recent events.

    Examples:
        skillforge export
        skillforge export report.json

    """
    forge_dir, _, ledger = open_project()

    if output is None:
        output = get_exports_dir(forge_dir) / "dashboard.json"
    elif output.suffix.lower() != ".json":
        console.print("[red]Output must be .json[/red]")
        raise typer.Exit(EXIT_INPUT_ERROR)

    with handle_errors():
        snapshot = write_snapshot(ledger, output)

    console.print(
        f"[green]Exported {snapshot.summary.skills_tracked} skill(s), "
        f"{snapshot.summary.total_runs} run(s) to {output}[/green]"
    )
