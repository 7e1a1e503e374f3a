"""Main Typer application — registers all CLI commands.

Entry point: ``marketledger`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from marketledger.cli.commands.demo import demo_cmd
from marketledger.cli.commands.journal import journal_cmd
from marketledger.config import config

app = typer.Typer(
    name="marketledger",
    help="Marketledger: fixed-price asset marketplace with pull-based proceeds.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="demo", help="Run a list, buy and withdraw walk-through.")(demo_cmd)
app.command(name="journal", help="Show the events stored in an event journal.")(journal_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        config.log_level, "--log-level", help="Logging level for marketplace internals."
    ),
) -> None:
    """Configure logging before any command runs.

    ``MARKETLEDGER_DEBUG=true`` forces DEBUG regardless of ``--log-level``.
    """
    logging.basicConfig(
        level="DEBUG" if config.debug else log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
