# Copyright (c) Syntropy Systems
"""Dashboard command - serve the read-only ledger API."""

import typer
from rich.console import Console

from skillforge.config import get_db_path, load_config, require_forge_dir

console = Console()


def dashboard(
    port: int = typer.Option(8265, "--port", "-p", help="Port to run the dashboard on"),
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
) -> None:
    """Serve the ledger snapshot as a read-only JSON API."""
    try:
        import uvicorn

        from skillforge.dashboard import create_app
    except ImportError as e:
        error_message = "[red]Dashboard dependencies not installed.[/red]"
        install_message = "Install with: [cyan]pip install skillforge[dashboard][/cyan]"
        console.print(f"{error_message}\n{install_message}")
        raise typer.Exit(1) from e

    try:
        forge_dir = require_forge_dir()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    app = create_app(get_db_path(forge_dir), window=load_config(forge_dir).window)

    console.print("[bold]skillforge dashboard[/bold]")
    console.print(f"  API: [cyan]http://{host}:{port}/api/export[/cyan]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(app, host=host, port=port, log_level="warning")
