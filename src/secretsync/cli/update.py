"""Update commands: refresh secrets and edit .configure fields."""

from __future__ import annotations

import click

from .. import api
from ._common import console, handle_errors, prompter


def register_update_commands(main: click.Group) -> None:
    """Register the update command group."""

    @main.group("update", invoke_without_command=True)
    @click.option(
        "-f", "--force", "noninteractive", is_flag=True,
        help="Run in non-interactive mode (useful for CI or embedded contexts).",
    )
    @click.option("-c", "--configuration-file-path", default=None, type=click.Path())
    @click.pass_context
    @handle_errors
    def update(ctx, noninteractive, configuration_file_path):
        """Update this project's encrypted secrets to the latest version.

        \b
        1. Fetch the latest data for the secrets repository
        2. Offer to change which secrets branch the project uses
        3. Offer to move the project to the latest secrets
        4. Encrypt the mapped files into .configure-files/ and decrypt
           them into the project
        """
        ctx.ensure_object(dict)
        ctx.obj["configuration_file_path"] = configuration_file_path
        if ctx.invoked_subcommand is not None:
            return

        configuration = api.update(
            not noninteractive, configuration_file_path, prompter=prompter()
        )
        if configuration is not None:
            console.print(f"\n  Pinned to [cyan]{configuration.pinned_hash or 'nothing'}[/]\n")

    @update.command("set-project-name")
    @click.argument("project_name")
    @click.pass_context
    @handle_errors
    def set_project_name(ctx, project_name):
        """Update the project name field. Quote multi-word names."""
        api.update_project_name(project_name, ctx.obj["configuration_file_path"])

    @update.command("set-branch-name")
    @click.argument("branch_name")
    @click.pass_context
    @handle_errors
    def set_branch_name(ctx, branch_name):
        """Update the secrets branch field."""
        api.update_branch_name(branch_name, ctx.obj["configuration_file_path"])

    @update.command("set-commit-hash")
    @click.argument("commit_hash")
    @click.pass_context
    @handle_errors
    def set_commit_hash(ctx, commit_hash):
        """Update the pinned commit hash field."""
        api.update_pinned_hash(commit_hash, ctx.obj["configuration_file_path"])
