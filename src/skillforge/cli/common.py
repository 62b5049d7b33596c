# Copyright (c) Syntropy Systems
"""Helpers shared by skillforge commands."""
from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from skillforge.config import ForgeConfig, get_db_path, load_config, require_forge_dir
from skillforge.errors import ContentUnavailable, StorageFailure
from skillforge.ledger import Ledger
from skillforge.models.pipeline import Recommendation

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from skillforge.models.ledger import AggregateView

console = Console()

EXIT_INPUT_ERROR = 1
EXIT_STORAGE_FAILURE = 2

RECOMMENDATION_STYLES = {
    Recommendation.OPTIMIZE: "red",
    Recommendation.MONITOR: "yellow",
    Recommendation.OK: "green",
}


@contextmanager
def handle_errors(content: bool = True) -> Iterator[None]:  # noqa: FBT001, FBT002
    """Turn skillforge errors into a message and an exit code.

    With content=False, ContentUnavailable passes through for the caller
    to handle per skill.
    """
    try:
        yield
    except ContentUnavailable as e:
        if not content:
            raise
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_INPUT_ERROR) from e
    except StorageFailure as e:
        console.print(f"[red]Storage failure:[/red] {e}")
        raise typer.Exit(EXIT_STORAGE_FAILURE) from e


def open_project() -> tuple[Path, ForgeConfig, Ledger]:
    """Locate the .forge directory and open its ledger."""
    try:
        forge_dir = require_forge_dir()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_INPUT_ERROR) from e

    config = load_config(forge_dir)
    with handle_errors():
        ledger = Ledger(get_db_path(forge_dir), window=config.window)
    return forge_dir, config, ledger


def format_ms(value: float) -> str:
    """Format milliseconds for display."""
    if value >= 1000:
        return f"{value / 1000:.2f}s"
    return f"{value:.0f}ms"


def format_aggregate(aggregate: AggregateView) -> str:
    """One-line summary of an aggregate."""
    return (
        f"{aggregate.total_runs} runs, avg {format_ms(aggregate.avg_elapsed_ms)}, "
        f"p95 {format_ms(aggregate.p95_elapsed_ms)}, "
        f"{aggregate.total_tokens:.0f} tokens/run, "
        f"{aggregate.failure_rate * 100:.1f}% failed"
    )
