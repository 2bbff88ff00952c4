"""Shared utilities for all CLI command modules.

Provides the Rich console, logging setup, and the error handler every
command runs under.
"""

from __future__ import annotations

import functools
import logging
import sys

from rich.console import Console

from ..errors import SecretSyncError
from ..ui import Prompter

console = Console()
logger = logging.getLogger("secretsync.cli")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbosity: int) -> None:
    """Configure root logging from the number of ``-v`` flags."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    logger.debug("secretsync initialized")


def prompter() -> Prompter:
    return Prompter(console)


def handle_errors(func):
    """Report a ``SecretSyncError`` and exit with its code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SecretSyncError as exc:
            console.print(f"[bold red]Error:[/] {exc}")
            logger.debug("Command failed", exc_info=True)
            sys.exit(exc.exit_code)

    return wrapper
