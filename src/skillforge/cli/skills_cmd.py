# Copyright (c) Syntropy Systems
"""skillforge skills command."""
from __future__ import annotations

from rich.table import Table

from skillforge.cli.common import console, handle_errors, open_project
from skillforge.models.ledger import OptimizationState

STATE_STYLES = {
    OptimizationState.PENDING: "dim",
    OptimizationState.OPTIMIZED: "blue",
    OptimizationState.PROMOTED: "green",
    OptimizationState.REJECTED: "red",
}


def skills() -> None:
    """List registered skills with their version and optimization state."""
    _, _, ledger = open_project()

    with handle_errors():
        entries = ledger.skills()
        known = set(ledger.list_known_skills())

    if not entries:
        console.print("[dim]No skills registered[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Skill")
    table.add_column("Version")
    table.add_column("State")
    table.add_column("Savings", justify="right")
    table.add_column("Path", style="dim")

    for entry in entries:
        style = STATE_STYLES[entry.state]
        savings = f"{entry.token_savings * 100:.0f}%" if entry.token_savings is not None else "-"
        name = entry.skill_id if entry.skill_id in known else f"{entry.skill_id} [dim](no runs)[/dim]"
        table.add_row(
            name,
            entry.current_version,
            f"[{style}]{entry.state.value}[/{style}]",
            savings,
            entry.path,
        )

    console.print(table)
