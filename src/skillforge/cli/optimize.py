# Copyright (c) Syntropy Systems
"""skillforge optimize command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from skillforge.analyzer import Analyzer
from skillforge.cli.common import console, handle_errors, open_project
from skillforge.errors import ContentUnavailable
from skillforge.models.pipeline import Recommendation
from skillforge.optimizer import Optimizer
from skillforge.skills import resolve_definition, skill_id_for


def optimize(
    skill: Optional[Path] = typer.Option(
        None,
        "--skill", "-s",
        help="Skill directory (or definition file) to optimize; "
        "omit to optimize every flagged candidate",
    ),
) -> None:
    """Write an optimized artifact for one skill or for every candidate.

    Examples:
        skillforge optimize --skill skills/summarize
        skillforge optimize

    """
    _, config, ledger = open_project()
    optimizer = Optimizer(ledger, optimized_suffix=config.optimized_suffix)

    if skill is not None:
        definition = resolve_definition(skill, config.skill_file)
        skill_id = skill_id_for(definition)
        with handle_errors():
            if not definition.is_file():
                raise ContentUnavailable(str(definition), "definition file not found")
            console.print(f"Optimizing [bold]{skill_id}[/bold]...")
            outcome = optimizer.optimize(skill_id, definition)

        console.print(f"[green]Optimized:[/green] {', '.join(outcome.changes)}")
        console.print(f"  Saved ~{outcome.estimated_token_savings} tokens")
        console.print(f"  Written to {outcome.optimized_path}")
        return

    with handle_errors():
        candidates = [
            r for r in Analyzer(ledger).analyze_all()
            if r.recommendation == Recommendation.OPTIMIZE
        ]

    if not candidates:
        console.print("[dim]No skills need optimization. Run 'skillforge analyze' to check.[/dim]")
        return

    console.print(f"Optimizing {len(candidates)} candidate(s)...")
    optimized = 0
    for candidate in candidates:
        try:
            with handle_errors(content=False):
                entry = ledger.get_skill(candidate.skill_id)
                if entry is None or not Path(entry.path).is_file():
                    path = entry.path if entry is not None else candidate.skill_id
                    raise ContentUnavailable(path, "definition not found")
                outcome = optimizer.optimize(candidate.skill_id, Path(entry.path), candidate)
        except ContentUnavailable as e:
            console.print(f"  [yellow]Skipping {candidate.skill_id}: {e}[/yellow]")
            continue
        optimized += 1
        console.print(
            f"  [bold]{candidate.skill_id}[/bold] (score {candidate.score}): "
            f"saved ~{outcome.estimated_token_savings} tokens"
        )

    console.print(f"[green]Optimized {optimized} skill(s)[/green]")
