"""Upload commands for the chunkup CLI.

Commands:
- upload: Upload a file, in chunks when it is large
- plan: Show how a file would be sent, without any network access
"""

from __future__ import annotations

import json
import logging
import shutil
import sys
import threading
from collections.abc import Callable
from pathlib import Path

import click
import httpx

from chunkup.client.cli.config import (
    load_config,
    load_transfer_config,
    parse_form_fields,
)


class StatusLineAwareHandler(logging.Handler):
    """Logging handler that coordinates with the status line display.

    Clears the status line before printing log messages and restores it after.
    """

    def __init__(
        self,
        clear_func: Callable[[], None],
        update_func: Callable[[], None],
        lock: threading.Lock,
    ) -> None:
        super().__init__()
        self._clear_func = clear_func
        self._update_func = update_func
        self._lock = lock

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            with self._lock:
                self._clear_func()
                # Use stdout (same as status line) to prevent interleaving
                sys.stdout.write(msg + "\n")
                sys.stdout.flush()
                self._update_func()
        except Exception:
            self.handleError(record)


class StatusLine:
    """Single-line progress display rewritten in place."""

    def __init__(self, label: str) -> None:
        self.lock = threading.Lock()
        self._label = label
        self._text = ""
        self._last_len = 0

    def set(self, percent: int, loaded: int, total: int) -> None:
        with self.lock:
            self._text = f"{self._label}: {percent}% ({loaded}/{total} bytes)"
            self.update()

    def update(self) -> None:
        if not self._text:
            return
        term_width = shutil.get_terminal_size().columns
        status = self._text
        if len(status) > term_width - 3:
            status = status[: term_width - 6] + "..."
        clear_part = " " * max(0, self._last_len - len(status))
        sys.stdout.write(f"\r{status}{clear_part}")
        sys.stdout.flush()
        self._last_len = len(status)

    def clear(self) -> None:
        if self._last_len:
            sys.stdout.write("\r" + " " * self._last_len + "\r")
            sys.stdout.flush()
            self._last_len = 0

    def finish(self) -> None:
        with self.lock:
            if self._last_len:
                sys.stdout.write("\n")
                sys.stdout.flush()
                self._last_len = 0
            self._text = ""


def _configure_logging(status: StatusLine | None, verbose: bool) -> None:
    """Route chunkup log records to the terminal without breaking the status line."""
    handler: logging.Handler
    if status is not None:
        handler = StatusLineAwareHandler(
            clear_func=status.clear,
            update_func=status.update,
            lock=status.lock,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    level = logging.DEBUG if verbose else logging.WARNING
    handler.setLevel(level)

    chunkup_logger = logging.getLogger("chunkup")
    for existing in chunkup_logger.handlers[:]:
        chunkup_logger.removeHandler(existing)
    chunkup_logger.addHandler(handler)
    chunkup_logger.setLevel(level)
    chunkup_logger.propagate = False


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("endpoint")
@click.option("--server", "-s", help="Server base URL (default: from config).")
@click.option("--token", envvar="CHUNKUP_TOKEN", help="Bearer token (default: from config).")
@click.option("--field", "-f", "fields", multiple=True, help="Form field sent with every request, as key=value.")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Chunk size in bytes.")
@click.option("--max-retries", type=click.IntRange(min=0), help="Retries per chunk.")
@click.option("--retry-delay", type=click.FloatRange(min=0), help="Base retry delay in seconds.")
@click.option("--notify-abort", is_flag=True, help="Notify the server when a chunked upload is aborted.")
@click.option("--no-progress", is_flag=True, help="Disable the progress line.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
def upload(
    file: Path,
    endpoint: str,
    server: str | None,
    token: str | None,
    fields: tuple[str, ...],
    chunk_size: int | None,
    max_retries: int | None,
    retry_delay: float | None,
    notify_abort: bool,
    no_progress: bool,
    verbose: bool,
) -> None:
    """Upload FILE to ENDPOINT.

    Files larger than the chunk size are split into chunks that are sent one
    by one with retries, then reassembled by the server.
    """
    from chunkup.client.api import APIError, HTTPClient
    from chunkup.client.transfer import (
        FileUploader,
        TransferError,
        TransferRequest,
    )
    from chunkup.core.config import ServerConfig
    from chunkup.core.source import UploadSource

    config = load_config()
    server_url = server or config.get("server_url") or ""
    token = token or config.get("auth_token")
    if not server_url and not endpoint.startswith(("http://", "https://")):
        click.echo(
            "Error: No server configured. Use --server or 'chunkup configure'.",
            err=True,
        )
        sys.exit(1)

    try:
        form_fields = parse_form_fields(fields)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    transfer_config = load_transfer_config({
        "chunk_size": chunk_size,
        "max_retries": max_retries,
        "retry_delay": retry_delay,
        "notify_abort": notify_abort or None,
    })
    source = UploadSource.from_path(file)

    status = None if no_progress else StatusLine(f"Uploading {source.name}")
    _configure_logging(status, verbose)

    last_percent = 0

    def on_progress(percent: int, loaded: int, total: int) -> None:
        nonlocal last_percent
        last_percent = percent
        if status is not None:
            status.set(percent, loaded, total)

    request = TransferRequest.from_config(
        source, transfer_config, form_fields=form_fields, on_progress=on_progress
    )

    with HTTPClient(ServerConfig(server_url=server_url, token=token)) as client:
        uploader = FileUploader.from_config(client, transfer_config)
        try:
            result = uploader.upload(endpoint, request)
        except TransferError as e:
            if status is not None:
                status.finish()
            click.echo(f"Error: {e} (last progress: {e.percent}%)", err=True)
            sys.exit(1)
        except (APIError, httpx.RequestError) as e:
            if status is not None:
                status.finish()
            click.echo(f"Error: Upload failed: {e} (last progress: {last_percent}%)", err=True)
            sys.exit(1)

    if status is not None:
        status.finish()

    if result.total_chunks:
        click.echo(f"Uploaded {source.name} in {result.total_chunks} chunks ({result.retries} retries)")
    else:
        click.echo(f"Uploaded {source.name}")
    if result.body is not None:
        if isinstance(result.body, str):
            click.echo(result.body)
        else:
            click.echo(json.dumps(result.body, indent=2))


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--chunk-size", type=click.IntRange(min=1), help="Chunk size in bytes.")
@click.option("--threshold", type=click.IntRange(min=0), help="Chunked-upload threshold in bytes.")
def plan(file: Path, chunk_size: int | None, threshold: int | None) -> None:
    """Show how FILE would be uploaded, without contacting the server."""
    from chunkup.core.planning import (
        TransferMode,
        decide_transfer_mode,
        plan_chunks,
        should_use_chunked_upload,
    )
    from chunkup.core.source import UploadSource

    transfer_config = load_transfer_config({
        "chunk_size": chunk_size,
        "chunk_threshold": threshold,
    })
    source = UploadSource.from_path(file)
    mode = decide_transfer_mode(source.size, transfer_config.chunk_size)

    click.echo(f"File: {source.name} ({source.size} bytes, {source.content_type})")
    click.echo(f"Mode: {mode.value}")
    recommended = should_use_chunked_upload(source, transfer_config.chunk_threshold)
    click.echo(
        f"Chunked upload recommended: {'yes' if recommended else 'no'} "
        f"(threshold {transfer_config.chunk_threshold} bytes)"
    )
    if mode is TransferMode.DIRECT:
        return

    chunks = plan_chunks(source.size, transfer_config.chunk_size)
    click.echo(f"Chunks: {len(chunks)} x {transfer_config.chunk_size} bytes")
    for chunk in chunks:
        marker = " (last)" if chunk.is_last else ""
        click.echo(f"  #{chunk.index}: offset {chunk.offset}, {chunk.size} bytes{marker}")
