"""Shared rich console and logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def configure_logging(level: int = logging.INFO) -> None:
    """Route log records through rich on the shared console."""
    handler = RichHandler(
        console=console,
        show_level=True,
        show_path=False,
        show_time=False,
        rich_tracebacks=True,
    )
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)
