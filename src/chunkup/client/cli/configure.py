"""Configure command for the chunkup CLI.

Commands:
- configure: Store the server and transfer defaults
"""

from __future__ import annotations

import click

from chunkup.client.cli.config import get_config_file, load_config, save_config


@click.command()
@click.option("--server", "-s", help="Server base URL.")
@click.option("--token", help="Bearer token.")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Default chunk size in bytes.")
@click.option("--max-retries", type=click.IntRange(min=0), help="Default retries per chunk.")
@click.option("--retry-delay", type=click.FloatRange(min=0), help="Default base retry delay in seconds.")
def configure(
    server: str | None,
    token: str | None,
    chunk_size: int | None,
    max_retries: int | None,
    retry_delay: float | None,
) -> None:
    """Store default settings used by 'chunkup upload'.

    Without options, prints the current configuration.
    """
    config = load_config()
    updates = {
        "server_url": server.rstrip("/") if server else None,
        "auth_token": token,
        "chunk_size": chunk_size,
        "max_retries": max_retries,
        "retry_delay": retry_delay,
    }
    updates = {key: value for key, value in updates.items() if value is not None}

    if not updates:
        if not config:
            click.echo("No configuration set.")
        for key, value in sorted(config.items()):
            shown = "********" if key == "auth_token" else value
            click.echo(f"{key} = {shown}")
        return

    config.update(updates)
    save_config(config)
    click.echo(f"Saved configuration to {get_config_file()}")
