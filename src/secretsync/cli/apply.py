"""Apply command: decrypt this project's secrets into place."""

from __future__ import annotations

import click

from .. import api
from ._common import console, handle_errors, prompter


def register_apply_commands(main: click.Group) -> None:
    """Register the apply command."""

    @main.command("apply")
    @click.option(
        "-f", "--force", "noninteractive", is_flag=True,
        help="Run in non-interactive mode (useful for CI or embedded contexts).",
    )
    @click.option("-c", "--configuration-file-path", default=None, type=click.Path())
    @handle_errors
    def apply_cmd(noninteractive, configuration_file_path):
        """Decrypt the current secrets for this project."""
        applied = api.apply(
            not noninteractive, configuration_file_path, prompter=prompter()
        )
        if applied is None:
            return

        for item in applied:
            if item.backup is not None:
                console.print(f"  [green]updated[/] {item.destination}  [dim](backup: {item.backup.name})[/]")
            elif item.changed:
                console.print(f"  [green]written[/] {item.destination}")
            else:
                console.print(f"  [dim]unchanged[/] {item.destination}")
