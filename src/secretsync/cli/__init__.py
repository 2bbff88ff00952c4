"""
SecretSync CLI.

The main Click group is defined here and every command group is
registered from its own module.

Entry point: secretsync.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="secretsync")
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug).")
def main(verbose):
    """SecretSync — apply configuration secrets with strong encryption."""
    setup_logging(verbose)


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .update import register_update_commands
from .apply import register_apply_commands
from .setup import register_setup_commands
from .keys import register_key_commands

register_update_commands(main)
register_apply_commands(main)
register_setup_commands(main)
register_key_commands(main)
