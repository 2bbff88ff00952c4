"""Key commands: create-key, encrypt, decrypt."""

from __future__ import annotations

from pathlib import Path

import click

from .. import api
from ._common import console, handle_errors


def register_key_commands(main: click.Group) -> None:
    """Register key generation and single-file encryption commands."""

    @main.command("create-key")
    def create_key():
        """Create a new encryption key for use with a project."""
        click.echo(api.generate_encryption_key())

    @main.command("encrypt")
    @click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
    @click.option("-o", "--output", "output_file", default=None, type=click.Path())
    @click.option("-k", "--key", "encryption_key", default=None, help="Base64 encryption key.")
    @handle_errors
    def encrypt(input_file, output_file, encryption_key):
        """Encrypt a single file (output defaults to INPUT_FILE.enc)."""
        output, key, generated = api.encrypt_single_file(
            Path(input_file), Path(output_file) if output_file else None, encryption_key
        )
        if generated:
            console.print(
                f"  Using autogenerated key [bold]{key}[/]\n\n"
                "  Be sure to save it somewhere right away – it won't be available again."
            )
        console.print(f"  [green]Encrypted[/] {output}")

    @main.command("decrypt")
    @click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
    @click.option("-o", "--output", "output_file", default=None, type=click.Path())
    @click.option("-k", "--key", "encryption_key", required=True, help="Base64 encryption key.")
    @handle_errors
    def decrypt(input_file, output_file, encryption_key):
        """Decrypt a single file (strips .enc from INPUT_FILE by default)."""
        output = api.decrypt_single_file(
            Path(input_file), encryption_key, Path(output_file) if output_file else None
        )
        console.print(f"  [green]Decrypted[/] {output}")
