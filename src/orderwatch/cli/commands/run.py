"""
Run the ingestion service
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...core.config_manager import ConfigurationError, ConfigurationManager
from ...ingestion.directory_watcher import WatchError
from ...ingestion.service import IngestionService
from ...models.storage_models import StorageError
from ..utils.async_runner import async_command
from ..utils.logging_setup import configure_logging


@click.command()
@click.option("--directory", "-d", default=None, help="Directory to watch")
@click.option("--database", default=None, help="SQLite database path")
@click.option(
    "--process-existing",
    is_flag=True,
    help="Also queue matching files already in the directory",
)
@click.pass_context
@async_command
async def run(
    ctx: click.Context,
    directory: Optional[str],
    database: Optional[str],
    process_existing: bool,
) -> None:
    """
    Watch the incoming directory and ingest order files until interrupted.
    """
    console: Console = ctx.obj["console"]
    verbose: bool = ctx.obj.get("verbose", False)
    config_path = ctx.obj.get("config_path")

    try:
        config = await ConfigurationManager().load_config(
            Path(config_path) if config_path else None
        )
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(2)

    if directory:
        config.watcher.directory = directory
    if database:
        config.storage.database_path = database
    if process_existing:
        config.watcher.process_existing = True

    configure_logging(config.logging, console, verbose=verbose)

    console.print(
        f"[cyan]Watching[/cyan] {config.watcher.directory} "
        f"[cyan]for[/cyan] {config.watcher.pattern} "
        f"[cyan]into[/cyan] {config.storage.database_path}"
    )

    service = IngestionService(config)
    try:
        await service.run_forever()
    except (WatchError, StorageError) as e:
        console.print(f"[red]Ingestion service failed: {e}[/red]")
        if verbose:
            console.print_exception()
        ctx.exit(1)

    console.print("[green]Ingestion service stopped[/green]")
