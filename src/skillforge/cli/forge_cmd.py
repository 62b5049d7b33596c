# Copyright (c) Syntropy Systems
"""skillforge forge command - the full pipeline."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from skillforge.cli.common import (
    RECOMMENDATION_STYLES,
    console,
    handle_errors,
    open_project,
)
from skillforge.config import get_exports_dir
from skillforge.forge import Forge, ForgeReport


def forge(
    skills_dir: Path = typer.Argument(
        Path("skills"),
        help="Directory containing one sub-directory per skill",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Profile and score, but only report what would be optimized",
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations", "-n",
        min=1,
        help="Simulated runs per skill (default from config)",
    ),
) -> None:
    """Profile, analyze, optimize, validate and promote a directory of skills."""
    forge_dir, config, ledger = open_project()
    export_path = get_exports_dir(forge_dir) / "dashboard.json"

    console.print("[bold]skillforge[/bold]\n")
    with handle_errors():
        report = Forge(ledger, config).run(
            skills_dir,
            iterations=iterations,
            dry_run=dry_run,
            export_path=export_path,
        )

    console.print(f"Found {len(report.discovered)} skill(s) in {skills_dir}")

    if report.scores:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Skill")
        table.add_column("Score", justify="right")
        table.add_column("Recommendation")
        table.add_column("Result")
        for result in report.scores:
            style = RECOMMENDATION_STYLES[result.recommendation]
            table.add_row(
                result.skill_id,
                f"{result.score}/100",
                f"[{style}]{result.recommendation.value}[/{style}]",
                _outcome_label(report, result.skill_id),
            )
        console.print(table)

    if not report.candidates:
        console.print("\n[green]All skills look healthy. Nothing to optimize.[/green]")

    for skill_id in report.promoted:
        verdict = report.verdicts[skill_id]
        console.print(
            f"[green]{skill_id} {verdict.version} promoted[/green] "
            f"({verdict.token_savings * 100:.0f}% tokens saved)"
        )
    for skill_id in report.rejected:
        verdict = report.verdicts[skill_id]
        console.print(f"[red]{skill_id} {verdict.version} rejected[/red] ({verdict.summary()})")
    for skill_id, reason in report.skipped.items():
        console.print(f"[yellow]{skill_id} skipped:[/yellow] {reason}")

    if report.export_path is not None:
        console.print(f"\n[dim]Dashboard data written to {report.export_path}[/dim]")


def _outcome_label(report: ForgeReport, skill_id: str) -> str:
    if skill_id in report.promoted:
        return "[green]promoted[/green]"
    if skill_id in report.rejected:
        return "[red]rejected[/red]"
    if skill_id in report.dry_run:
        return "[dim]would optimize[/dim]"
    if skill_id in report.skipped:
        return "[yellow]skipped[/yellow]"
    return "-"
