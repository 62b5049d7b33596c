# Copyright (c) Syntropy Systems
"""skillforge validate command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from skillforge.cli.common import EXIT_INPUT_ERROR, console, handle_errors, open_project
from skillforge.execution import SimulatedExecutor
from skillforge.skills import optimized_path_for, resolve_definition, skill_id_for
from skillforge.validator import Validator


def validate(
    skill: Path = typer.Option(
        ...,
        "--skill", "-s",
        help="Skill directory (or definition file) whose optimized artifact to check",
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations", "-n",
        min=1,
        help="A/B rounds (default from config)",
    ),
) -> None:
    """A/B test a skill's optimized artifact against the original.

    The artifact is promoted when it passes.
    """
    _, config, ledger = open_project()

    definition = resolve_definition(skill, config.skill_file)
    optimized = optimized_path_for(definition, config.optimized_suffix)
    skill_id = skill_id_for(definition)

    if not optimized.is_file():
        console.print(
            f"[red]Error:[/red] No optimized version found at {optimized}. "
            f"Run 'skillforge optimize --skill {skill}' first."
        )
        raise typer.Exit(EXIT_INPUT_ERROR)

    executor = SimulatedExecutor(
        min_latency_ms=config.min_latency_ms,
        max_latency_ms=config.max_latency_ms,
        failure_probability=config.failure_probability,
        timeout=config.execution_timeout,
    )
    validator = Validator(ledger, executor)

    console.print(f"Validating [bold]{skill_id}[/bold]: original vs optimized...")
    with handle_errors():
        verdict = validator.validate_files(
            skill_id,
            definition,
            optimized,
            iterations=iterations or config.validation_iterations,
        )
        if verdict.passed:
            validator.promote(verdict)
        else:
            validator.reject(verdict)

    result = "[green]PASSED[/green]" if verdict.passed else "[red]FAILED[/red]"
    console.print(f"\nResult: {result}")
    console.print(f"  Similarity: {verdict.similarity * 100:.0f}%")
    console.print(f"  Speed improvement: {verdict.speed_improvement * 100:.0f}%")
    console.print(f"  Token savings: {verdict.token_savings * 100:.0f}%")

    if verdict.passed:
        console.print(f"\n[green]{skill_id} {verdict.version} promoted[/green]")
