# Copyright (c) Syntropy Systems
"""skillforge init command."""

from pathlib import Path
from typing import Optional

import typer

from skillforge.cli.common import console, handle_errors
from skillforge.config import (
    FORGE_DIR_NAME,
    ForgeConfig,
    get_db_path,
    get_exports_dir,
    save_config,
)
from skillforge.ledger import Ledger


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
    window: Optional[int] = typer.Option(
        None,
        "--window",
        min=0,
        help="Samples aggregated per skill (default: 500)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers", "-w",
        min=1,
        help="Concurrent profiling workers (default: 1)",
    ),
) -> None:
    """Initialize a new skillforge project.

    Writes .forge/config.yaml, creates the ledger and the exports directory.
    An existing project is left untouched.
    """
    forge_dir = path.resolve() / FORGE_DIR_NAME

    if forge_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {forge_dir}")
        return

    config = ForgeConfig()
    if window is not None:
        config.window = window
    if workers is not None:
        config.workers = workers

    exports_dir = get_exports_dir(forge_dir)
    exports_dir.mkdir(parents=True)
    config_path = save_config(config, forge_dir)
    with handle_errors():
        ledger = Ledger(get_db_path(forge_dir), window=config.window)

    console.print(f"[green]Initialized skillforge project:[/green] {forge_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
    console.print(f"  [dim]ledger:[/dim] {ledger.db_path}")
    console.print(f"  [dim]exports:[/dim] {exports_dir}")
