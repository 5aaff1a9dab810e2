"""Shared configuration classes for chunkup.

This module defines the connection settings used by the HTTP client and the
transfer settings used by the uploader and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from chunkup.core.planning import DEFAULT_CHUNK_SIZE, DEFAULT_CHUNK_THRESHOLD

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 2.0  # seconds
DEFAULT_DIRECT_TIMEOUT = 120.0  # seconds
DEFAULT_CHUNK_TIMEOUT = 30.0  # seconds


@dataclass
class ServerConfig:
    """Configuration for connecting to an upload server.

    Attributes:
        server_url: Base URL of the server (e.g., "https://files.example.com").
        token: Optional bearer token sent with every request.
        timeout: Default request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    server_url: str
    token: str | None = None
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize server URL."""
        self.server_url = self.server_url.rstrip("/")


@dataclass
class TransferConfig:
    """Tunables for a single transfer.

    Attributes:
        chunk_size: Size of each chunk in bytes; sources at or below it go direct.
        max_retries: Retries per chunk after the first attempt.
        retry_delay: Base backoff delay in seconds, doubled on each retry.
        chunk_threshold: Threshold used by the chunked-upload helper.
        direct_timeout: Timeout of the single direct request in seconds.
        chunk_timeout: Timeout of each chunk request in seconds.
        notify_abort: Send DELETE <url>/<uploadId> when a chunked transfer aborts.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    chunk_threshold: int = DEFAULT_CHUNK_THRESHOLD
    direct_timeout: float = DEFAULT_DIRECT_TIMEOUT
    chunk_timeout: float = DEFAULT_CHUNK_TIMEOUT
    notify_abort: bool = False

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must not be negative, got {self.retry_delay}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransferConfig:
        """Build from a config mapping, ignoring unknown keys.

        Values may be strings (as stored by the CLI config file).
        """
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            value = data[f.name]
            default = f.default
            if isinstance(default, bool):
                if isinstance(value, str):
                    value = value.strip().lower() in ("1", "true", "yes", "on")
                kwargs[f.name] = bool(value)
            elif isinstance(default, int):
                kwargs[f.name] = int(value)
            else:
                kwargs[f.name] = float(value)
        return cls(**kwargs)
