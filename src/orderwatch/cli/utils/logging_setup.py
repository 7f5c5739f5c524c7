"""
Logging setup for the CLI host
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from ...models.config_models import LoggingConfig


def configure_logging(
    logging_config: LoggingConfig,
    console: Console,
    verbose: bool = False
) -> None:
    """Install rich console logging (and an optional file log) on the root logger."""
    handlers: list = [RichHandler(console=console, rich_tracebacks=True)]
    if logging_config.file_path:
        file_handler = logging.FileHandler(logging_config.file_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging_config.level,
        format=logging_config.format,
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    if verbose:
        logging.getLogger("orderwatch").setLevel(logging.DEBUG)
