"""Setup commands: init and validate."""

from __future__ import annotations

import json
import sys

import click
from rich.table import Table

from .. import api
from ._common import console, handle_errors, prompter


def register_setup_commands(main: click.Group) -> None:
    """Register init and validate."""

    @main.command("init")
    @click.option("-c", "--configuration-file-path", default=None, type=click.Path())
    @handle_errors
    def init(configuration_file_path):
        """Change secrets settings for this project, step by step."""
        configuration = api.init(configuration_file_path, prompter=prompter())
        console.print(
            f"\n  [green]Saved[/] {configuration.project_name} "
            f"with {len(configuration.files_to_copy)} file(s)\n"
        )

    @main.command("validate")
    @click.option("-c", "--configuration-file-path", default=None, type=click.Path())
    @click.option("--json", "json_out", is_flag=True, help="Output the report as JSON.")
    @handle_errors
    def validate(configuration_file_path, json_out):
        """Ensure the .configure file is valid."""
        configuration, report = api.validate(configuration_file_path)

        if json_out:
            click.echo(json.dumps(report.to_dict(), indent=2))
            sys.exit(0 if report.all_passed else 1)

        if configuration.is_empty():
            console.print("  [yellow]Unable to validate configuration – it is empty[/]")
            return

        table = Table(title=report.configuration_path, show_lines=False)
        table.add_column("Check")
        table.add_column("Result")
        table.add_column("Detail", style="dim")
        for check in report.checks:
            result = "[green]PASS[/]" if check.passed else "[red]FAIL[/]"
            detail = check.detail if check.passed else f"{check.detail}\n→ {check.fix}"
            table.add_row(check.description, result, detail)
        console.print(table)

        if not report.all_passed:
            console.print(f"\n  [red]{report.failed_count} check(s) failed[/]\n")
            sys.exit(1)
