# Copyright (c) Syntropy Systems
"""skillforge doctor command."""

import sqlite3
from typing import cast

from rich.console import Console

from skillforge.config import find_forge_dir, get_db_path, get_exports_dir, load_config
from skillforge.db import get_connection
from skillforge.errors import StorageFailure
from skillforge.ledger import Ledger

console = Console()


def doctor() -> None:
    """Check skillforge setup and diagnose issues.

    Verifies:
    - .forge directory exists
    - SQLite ledger is healthy and in WAL mode
    - stored records parse back cleanly
    - exports directory exists
    """
    issues: list[str] = []
    warnings: list[str] = []

    # Check forge directory
    forge_dir = find_forge_dir()
    if forge_dir is None:
        console.print("[red]✗[/red] No .forge directory found")
        console.print("  Run [bold]skillforge init[/bold] to initialize a project")
        return

    console.print(f"[green]✓[/green] forge directory: {forge_dir}")

    # Check database
    db_path = get_db_path(forge_dir)
    if not db_path.exists():
        console.print(f"[red]✗[/red] Database not found: {db_path}")
        issues.append("Database missing")
    else:
        conn = None
        try:
            conn = get_connection(db_path)
            result = cast(
                "sqlite3.Row | None",
                conn.execute("PRAGMA journal_mode").fetchone(),
            )
            if result is not None and cast("str", result[0]).lower() == "wal":
                console.print("[green]✓[/green] SQLite: WAL mode enabled")
            else:
                journal_mode = cast("str", result[0]) if result is not None else "unknown"
                console.print(
                    f"[yellow]⚠[/yellow] SQLite: journal_mode is {journal_mode}, expected WAL"
                )
                warnings.append("Not using WAL mode")
        except sqlite3.Error as e:
            console.print(f"[red]✗[/red] Database error: {e}")
            issues.append(f"Database error: {e}")
        finally:
            if conn is not None:
                conn.close()

        if not issues:
            try:
                ledger = Ledger(db_path, window=load_config(forge_dir).window)
                counts = ledger.counts()
                malformed = ledger.scan()
            except StorageFailure as e:
                console.print(f"[red]✗[/red] Ledger error: {e}")
                issues.append(f"Ledger error: {e}")
            else:
                console.print(
                    f"[green]✓[/green] Ledger: {counts['samples']} samples, "
                    f"{counts['events']} events, {counts['skills']} registered skills"
                )
                skipped = sum(malformed.values())
                if skipped:
                    console.print(
                        f"[yellow]⚠[/yellow] {malformed['samples']} malformed samples, "
                        f"{malformed['events']} malformed events (skipped on read)"
                    )
                    warnings.append(f"{skipped} malformed record(s)")
                else:
                    console.print("[green]✓[/green] All stored records parse cleanly")

    # Check exports directory
    exports_dir = get_exports_dir(forge_dir)
    if exports_dir.exists():
        console.print(f"[green]✓[/green] Exports directory: {exports_dir}")
    else:
        console.print("[yellow]⚠[/yellow] Exports directory not found")
        warnings.append("Exports directory missing")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
    elif warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
