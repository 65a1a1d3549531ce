"""Define utility functions to simplify logging to the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def configure_logging(level: int | str = logging.INFO) -> None:
    """Route log records from all modules through a rich handler writing to the console.

    :param level: Minimum level of log records that are displayed
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
