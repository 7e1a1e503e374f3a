"""``marketledger demo`` — list, buy and withdraw against in-memory collaborators.

Walks through the canonical sale: a seller lists asset #0, a buyer pays the
listing price, the seller withdraws the proceeds, and a second withdrawal
is rejected.  Every emitted event is journaled and shown at the end.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from marketledger.config import MarketConfig
from marketledger.core.asset_authority import InMemoryAssetRegistry
from marketledger.core.errors import MarketplaceError
from marketledger.core.event_journal import EventJournal
from marketledger.core.marketplace import Marketplace
from marketledger.core.value_transfer import InMemoryWallets

console = Console()

COLLECTION = "basic-nft"
ASSET_ID = 0
SELLER = "deployer"
BUYER = "user"


def _state_table(market: Marketplace, registry: InMemoryAssetRegistry, wallets: InMemoryWallets) -> Table:
    listing = market.get_listing(COLLECTION, ASSET_ID)
    table = Table(show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("owner", registry.owner_of(COLLECTION, ASSET_ID))
    table.add_row(
        "listing",
        f"{listing.price} by {listing.seller}" if listing.is_active else "[dim]not listed[/dim]",
    )
    table.add_row(f"proceeds[{SELLER}]", str(market.get_proceeds(SELLER)))
    table.add_row(f"wallet[{SELLER}]", str(wallets.balance_of(SELLER)))
    table.add_row(f"wallet[{BUYER}]", str(wallets.balance_of(BUYER)))
    return table


def demo_cmd(
    price: int = typer.Option(100, "--price", "-p", help="Listing price for asset #0."),
    journal_db: str = typer.Option(
        ".marketledger/demo-journal.db",
        "--journal",
        help="Path to the event journal SQLite database (uses demo-specific default).",
    ),
) -> None:
    """Run the list, buy and withdraw walk-through."""
    config = MarketConfig(journal_path=Path(journal_db), journal_enabled=True)
    registry = InMemoryAssetRegistry()
    wallets = InMemoryWallets()
    market = Marketplace.from_config(registry, wallets, config)
    journal = EventJournal(config.journal_path)
    first_event = journal.count()

    wallets.fund(BUYER, price)
    registry.mint(COLLECTION, ASSET_ID, owner=SELLER)
    registry.approve(COLLECTION, ASSET_ID, agent=market.marketplace_id, caller=SELLER)

    console.print()
    console.print(Panel(f"[bold]Marketledger demo[/bold] on marketplace [cyan]{market.marketplace_id}[/cyan]"))

    try:
        market.list_item(COLLECTION, ASSET_ID, price, caller=SELLER)
        console.print(f"[green]Listed[/green] {COLLECTION}#{ASSET_ID} at {price}")

        wallets.charge(BUYER, price)
        market.buy_item(COLLECTION, ASSET_ID, price, caller=BUYER)
        console.print(f"[green]Bought[/green] by {BUYER}")
        console.print(_state_table(market, registry, wallets))

        amount = market.withdraw_proceeds(SELLER)
        console.print(f"[green]Withdrew[/green] {amount} to {SELLER}")
        console.print(_state_table(market, registry, wallets))
    except MarketplaceError as exc:
        console.print(f"[bold red]Demo failed:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    try:
        market.withdraw_proceeds(SELLER)
    except MarketplaceError as exc:
        console.print(f"[yellow]Second withdrawal rejected:[/yellow] {type(exc).__name__}")

    events = journal.get_events()[first_event:]
    table = Table(title="Events")
    table.add_column("Kind", style="cyan")
    table.add_column("Asset")
    table.add_column("Party")
    table.add_column("Price", justify="right")
    for event in events:
        table.add_row(
            event.event_kind.value,
            f"{event.collection}#{event.asset_id}",
            event.party,
            str(getattr(event, "price", "")),
        )
    console.print(table)
    console.print(f"[dim]Journal: {config.journal_path}[/dim]")
