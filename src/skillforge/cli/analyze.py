# Copyright (c) Syntropy Systems
"""skillforge analyze command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter
from rich.table import Table

from skillforge.analyzer import Analyzer
from skillforge.cli.common import (
    RECOMMENDATION_STYLES,
    console,
    format_ms,
    handle_errors,
    open_project,
)
from skillforge.models.pipeline import CandidateScore

_RESULTS_ADAPTER = TypeAdapter(list[CandidateScore])


def analyze(
    json_out: Optional[Path] = typer.Option(
        None,
        "--json", "-j",
        help="Also write the ranked results to this JSON file",
    ),
    record: bool = typer.Option(
        True,
        "--record/--no-record",
        help="Record an analyzer event per skill",
    ),
) -> None:
    """Rank every tracked skill by optimization potential."""
    _, _, ledger = open_project()
    analyzer = Analyzer(ledger)

    with handle_errors():
        results = analyzer.analyze_all()
        if not results:
            console.print("[dim]No skills profiled yet. Run 'skillforge profile' first.[/dim]")
            return
        if record:
            analyzer.record(results)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Skill")
    table.add_column("Score", justify="right")
    table.add_column("Recommendation")
    table.add_column("Runs", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Reasons")

    for result in results:
        style = RECOMMENDATION_STYLES[result.recommendation]
        table.add_row(
            result.skill_id,
            f"{result.score}/100",
            f"[{style}]{result.recommendation.value}[/{style}]",
            str(result.aggregate.total_runs),
            format_ms(result.aggregate.avg_elapsed_ms),
            "\n".join(result.reasons) or "-",
        )

    console.print(table)

    if json_out is not None:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        _ = json_out.write_bytes(_RESULTS_ADAPTER.dump_json(results, indent=2))
        console.print(f"[green]Wrote analysis to {json_out}[/green]")
