# Copyright (c) Syntropy Systems
"""skillforge profile command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, cast

import typer

from skillforge.cli.common import (
    EXIT_INPUT_ERROR,
    console,
    format_aggregate,
    handle_errors,
    open_project,
)
from skillforge.errors import ContentUnavailable
from skillforge.execution import SimulatedExecutor
from skillforge.profiler import Profiler
from skillforge.skills import resolve_definition


def profile(
    skill: Optional[Path] = typer.Option(
        None,
        "--skill", "-s",
        help="Skill directory (or its definition file) to profile",
    ),
    skills_dir: Optional[Path] = typer.Option(
        None,
        "--dir", "-d",
        help="Directory of skills to profile",
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations", "-n",
        min=1,
        help="Simulated runs per skill (default from config)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers", "-w",
        min=1,
        help="Skills to profile concurrently (default from config)",
    ),
) -> None:
    """Profile one skill or a directory of skills.

    Examples:
        skillforge profile --skill skills/summarize
        skillforge profile --dir skills --iterations 10

    """
    if (skill is None) == (skills_dir is None):
        console.print("[red]Error:[/red] Pass exactly one of --skill or --dir")
        raise typer.Exit(EXIT_INPUT_ERROR)

    _, config, ledger = open_project()
    iterations = iterations or config.iterations
    executor = SimulatedExecutor(
        min_latency_ms=config.min_latency_ms,
        max_latency_ms=config.max_latency_ms,
        failure_probability=config.failure_probability,
        timeout=config.execution_timeout,
    )
    profiler = Profiler(ledger, executor)

    with handle_errors():
        if skill is not None:
            definition = resolve_definition(skill, config.skill_file)
            if not definition.is_file():
                raise ContentUnavailable(str(definition), "definition file not found")

            console.print(
                f"Profiling [bold]{definition.parent.name}[/bold] ({iterations} iterations)..."
            )
            aggregate = profiler.profile_skill_file(definition, iterations)
            console.print(f"[green]Done:[/green] {format_aggregate(aggregate)}")
            return

        results = profiler.profile_directory(
            cast("Path", skills_dir),
            iterations=iterations,
            workers=workers or config.workers,
            skill_file=config.skill_file,
        )

    if not results:
        console.print(f"[yellow]No skills found in {skills_dir}[/yellow]")
        return

    for skill_id, aggregate in results.items():
        console.print(f"  [bold]{skill_id}[/bold]: {format_aggregate(aggregate)}")
    console.print(f"[green]Profiled {len(results)} skill(s)[/green]")
