# Copyright (c) Syntropy Systems
"""Main CLI entry point for skillforge."""

import logging

import typer
from rich.logging import RichHandler

from skillforge.cli.analyze import analyze
from skillforge.cli.dashboard import dashboard
from skillforge.cli.doctor import doctor
from skillforge.cli.export import export
from skillforge.cli.forge_cmd import forge
from skillforge.cli.init_cmd import init
from skillforge.cli.optimize import optimize
from skillforge.cli.profile import profile
from skillforge.cli.skills_cmd import skills
from skillforge.cli.validate import validate

app = typer.Typer(
    name="skillforge",
    help=(
        "Skill cost tracking. Profile skills, rank the wasteful ones, "
        "rewrite them, promote what passes."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show pipeline log messages",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Register commands
_ = app.command()(init)
_ = app.command()(profile)
_ = app.command()(analyze)
_ = app.command()(optimize)
_ = app.command()(validate)
_ = app.command()(forge)
_ = app.command(name="export")(export)
_ = app.command()(skills)
_ = app.command()(doctor)
_ = app.command()(dashboard)


if __name__ == "__main__":
    app()
