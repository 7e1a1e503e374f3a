"""``marketledger journal`` — show the events stored in an event journal."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from marketledger.config import config
from marketledger.core.event_journal import EventJournal, JournalIntegrityError
from marketledger.models.events import EventKind

console = Console()


def journal_cmd(
    journal_db: str = typer.Option(
        str(config.journal_path),
        "--journal",
        "-j",
        help="Path to the event journal SQLite database.",
    ),
    kind: str = typer.Option(
        None,
        "--kind",
        "-k",
        help="Only show events of this kind (item_listed, item_canceled, item_bought).",
    ),
    collection: str = typer.Option(None, "--collection", "-c", help="Only show this collection."),
    verify: bool = typer.Option(
        False,
        "--verify",
        "-V",
        help="Verify the hash chain integrity before displaying.",
    ),
) -> None:
    """Show journaled marketplace events."""
    db_path = Path(journal_db)
    if not db_path.exists():
        console.print(f"[bold red]Journal not found:[/bold red] {journal_db}")
        raise typer.Exit(code=1)

    try:
        kind_filter = EventKind(kind) if kind else None
    except ValueError:
        console.print(f"[bold red]Unknown event kind:[/bold red] {kind}")
        raise typer.Exit(code=1) from None

    journal = EventJournal(db_path)

    if verify:
        try:
            journal.verify_chain()
            console.print("[bold green]Hash chain valid.[/bold green]")
        except JournalIntegrityError as exc:
            console.print(f"[bold red]Chain verification failed:[/bold red] {exc}")
            raise typer.Exit(code=2) from exc

    events = journal.get_events(kind=kind_filter, collection=collection)
    if not events:
        console.print("[dim]No events.[/dim]")
        return

    table = Table(title=f"Events in {db_path}")
    table.add_column("Time", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Asset")
    table.add_column("Party")
    table.add_column("Price", justify="right")
    for event in events:
        table.add_row(
            event.timestamp_utc.strftime("%Y-%m-%d %H:%M:%S"),
            event.event_kind.value,
            f"{event.collection}#{event.asset_id}",
            event.party,
            str(getattr(event, "price", "")),
        )
    console.print(table)
