"""
Interactive project setup.

Walks the operator through naming the project, choosing a secrets
branch and declaring which files to copy, then pins the configuration to
the branch's current tip and makes sure the project has a key.
"""

from __future__ import annotations

import logging
from typing import Optional

from .context import SyncContext
from .engine import SyncEngine
from .models import Configuration, SecretFile
from .project import write_configuration
from .ui import Prompter

logger = logging.getLogger("secretsync.wizard")


def setup_configuration(
    configuration: Configuration,
    context: SyncContext,
    prompter: Optional[Prompter] = None,
) -> Configuration:
    """Fill in a configuration interactively and save it.

    Args:
        configuration: Starting configuration, usually empty.
        context: Run context. Requires a secrets store.
        prompter: Operator interaction.

    Returns:
        Configuration: The saved configuration.
    """
    prompter = prompter or Prompter()
    store = context.require_store()
    configuration = configuration.model_copy(deep=True)

    prompter.heading("Configure Setup")
    prompter.info("Let's get configuration set up for this project.")

    configuration = prompt_for_project_name_if_needed(configuration, prompter)
    configuration = SyncEngine(context, prompter).choose_branch(configuration, force=True)
    configuration.pinned_hash = store.local_revision(configuration.branch)
    configuration = prompt_to_add_files(configuration, context, prompter)

    logger.info("Writing changes to %s", context.configuration_path)
    write_configuration(configuration, context.configuration_path)

    context.require_keys().ensure_key(configuration.project_name)
    return configuration


def prompt_for_project_name_if_needed(
    configuration: Configuration, prompter: Prompter
) -> Configuration:
    if not configuration.needs_project_name:
        return configuration

    configuration.project_name = prompter.prompt("What is the name of your project?")
    prompter.info(f"Project Name set to: {configuration.project_name}")
    return configuration


def prompt_to_add_files(
    configuration: Configuration, context: SyncContext, prompter: Prompter
) -> Configuration:
    message = "Would you like to add files?"
    if configuration.files_to_copy:
        message = "Would you like to add additional files?"

    files = list(configuration.files_to_copy)
    while prompter.confirm(message):
        secret = prompt_to_add_file(context, prompter)
        if secret is not None:
            files.append(secret)

    configuration.files_to_copy = files
    return configuration


def prompt_to_add_file(context: SyncContext, prompter: Prompter) -> Optional[SecretFile]:
    """Ask for one source/destination pair.

    Returns:
        SecretFile, or None when the source is not in the secrets store.
    """
    source = prompter.prompt("Enter the source file path (relative to the secrets root):")

    full_source = context.secrets_root / source
    if not full_source.is_file():
        prompter.warn(f"Source file does not exist: {full_source}")
        return None

    destination = prompter.prompt(
        "Enter the destination file path (relative to the project root):"
    )
    logger.debug("Destination: %s", context.project_root / destination)
    return SecretFile(source=source, destination=destination)
