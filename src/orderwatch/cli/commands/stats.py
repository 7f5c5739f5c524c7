"""
Show stored record counts
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...core.config_manager import ConfigurationError, ConfigurationManager
from ...core.order_store import OrderStore
from ...models.storage_models import StorageError
from ..utils.async_runner import async_command


@click.command()
@click.option("--database", default=None, help="SQLite database path")
@click.pass_context
@async_command
async def stats(ctx: click.Context, database: Optional[str]) -> None:
    """
    Show how many valid orders, invalid orders and fingerprints are stored.
    """
    console: Console = ctx.obj["console"]
    config_path = ctx.obj.get("config_path")

    if not database:
        try:
            config = await ConfigurationManager().load_config(
                Path(config_path) if config_path else None
            )
        except ConfigurationError as e:
            console.print(f"[red]{e}[/red]")
            ctx.exit(2)
        database = config.storage.database_path

    if not Path(database).expanduser().exists():
        console.print(f"[yellow]No database at {database}[/yellow]")
        ctx.exit(1)

    try:
        async with OrderStore(database, enable_wal_mode=False) as store:
            counts = await store.get_counts()
            invalid_orders = await store.list_invalid_orders()
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)

    table = Table(title=f"OrderWatch records ({database})")
    table.add_column("Collection", style="cyan")
    table.add_column("Count", justify="right")
    for collection, count in counts.to_dict().items():
        table.add_row(collection.replace("_", " ").capitalize(), str(count))
    console.print(table)

    if invalid_orders:
        reasons: dict = {}
        for invalid in invalid_orders:
            reasons[invalid.reason] = reasons.get(invalid.reason, 0) + 1

        reason_table = Table(title="Invalid orders by reason")
        reason_table.add_column("Reason", style="yellow")
        reason_table.add_column("Count", justify="right")
        for reason, count in sorted(reasons.items(), key=lambda item: -item[1]):
            reason_table.add_row(reason, str(count))
        console.print(reason_table)
