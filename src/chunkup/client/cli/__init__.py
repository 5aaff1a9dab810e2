"""Command-line interface for chunkup.

This module provides the main CLI entry point and assembles all commands.

Commands:
- upload: Upload a file, in chunks when it is large
- plan: Show how a file would be uploaded
- configure: Store server and transfer defaults
"""

from __future__ import annotations

import click

from chunkup.client.cli.config import (
    get_config_dir,
    get_config_file,
    load_config,
    load_transfer_config,
    parse_form_fields,
    save_config,
)
from chunkup.client.cli.configure import configure
from chunkup.client.cli.upload import plan, upload


@click.group()
@click.version_option(package_name="chunkup")
def cli() -> None:
    """chunkup - Reliable chunked file uploads."""


cli.add_command(upload)
cli.add_command(plan)
cli.add_command(configure)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "main",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "load_transfer_config",
    "parse_form_fields",
    "save_config",
]
