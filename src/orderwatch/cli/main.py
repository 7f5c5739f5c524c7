"""
Main CLI entry point for OrderWatch
"""

from typing import Optional

import click
from rich.console import Console

# Initialize console
console = Console()


@click.group()
@click.version_option(version="1.0.0", prog_name="orderwatch")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to orderwatch.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[str]) -> None:
    """
    OrderWatch - directory-driven order ingestion

    Examples:
      orderwatch run                               # Watch ./IncomingOrders
      orderwatch run --directory /srv/drop         # Watch another directory
      orderwatch stats --database orders.db        # Show stored record counts
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path


# Import and register commands at module level to support testing
from .commands import run, stats  # noqa: E402

cli.add_command(run.run)
cli.add_command(stats.stats)


def main() -> None:
    """Main entry point for the CLI application"""
    cli()


if __name__ == "__main__":
    main()
