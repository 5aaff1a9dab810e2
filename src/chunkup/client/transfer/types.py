"""Shared types and dataclasses for transfers.

This module provides:
- TransferError, ChunkUploadError, FinalizeError, TransferCancelledError
- TransferProgress: Progress snapshot
- TransferRequest: Caller-supplied transfer description
- TransferResult: Outcome of a transfer
- TransferState: Per-transfer state machine states
- Type aliases for callbacks
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from chunkup.core.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from chunkup.core.planning import DEFAULT_CHUNK_SIZE, TransferMode

if TYPE_CHECKING:
    from chunkup.core.config import TransferConfig
    from chunkup.core.source import UploadSource


class TransferError(Exception):
    """Base exception for transfer failures.

    Attributes:
        percent: Percentage of bytes the server acknowledged before the
            failure. Bytes of a failed attempt are not included.
    """

    def __init__(self, message: str, percent: int = 0) -> None:
        super().__init__(message)
        self.percent = percent


class ChunkUploadError(TransferError):
    """A chunk failed on every attempt and the transfer was aborted.

    Attributes:
        chunk_index: 0-based index of the failing chunk.
        total_chunks: Number of chunks in the transfer.
        attempts: Attempts made for the failing chunk.
    """

    def __init__(
        self,
        chunk_index: int,
        total_chunks: int,
        attempts: int,
        percent: int = 0,
    ) -> None:
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks
        self.attempts = attempts
        super().__init__(
            f"Failed to upload chunk {chunk_index} of {total_chunks} "
            f"after {attempts} attempts",
            percent,
        )


class FinalizeError(TransferError):
    """The server could not reassemble the uploaded chunks."""

    def __init__(self, upload_id: str, reason: str, percent: int = 100) -> None:
        self.upload_id = upload_id
        super().__init__(f"Failed to finalize upload {upload_id}: {reason}", percent)


class TransferCancelledError(TransferError):
    """Raised when a transfer is cancelled before its next request."""


class TransferState(IntEnum):
    """State of a single transfer."""

    PLANNING = auto()
    IN_FLIGHT = auto()  # Direct request sent
    CHUNK_UPLOADING = auto()
    BACKOFF = auto()
    FINALIZING = auto()
    DONE = auto()
    FAILED = auto()
    ABORTED = auto()
    CANCELLED = auto()

    @property
    def is_terminal(self) -> bool:
        """Check if no further transitions can happen."""
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({
    TransferState.DONE,
    TransferState.FAILED,
    TransferState.ABORTED,
    TransferState.CANCELLED,
})


@dataclass(frozen=True)
class TransferProgress:
    """Progress snapshot of a transfer."""

    bytes_loaded: int
    bytes_total: int

    @property
    def percent(self) -> int:
        """Get progress percentage, rounded down."""
        if self.bytes_total <= 0:
            return 100
        return self.bytes_loaded * 100 // self.bytes_total


# Type alias for progress callback: (percent, bytes_loaded, bytes_total)
ProgressCallback = Callable[[int, int, int], None]

# Type alias for state transition callback
StateCallback = Callable[[TransferState], None]


@dataclass(frozen=True)
class TransferRequest:
    """Everything the caller supplies for one transfer.

    Attributes:
        source: Bytes to upload.
        form_fields: Fields sent with every request of the transfer.
        chunk_size: Chunk size in bytes; sources at or below it go direct.
        max_retries: Retries per chunk after the first attempt.
        retry_delay: Base backoff delay in seconds.
        on_progress: Optional progress callback.
    """

    source: UploadSource
    form_fields: Mapping[str, str] = field(default_factory=dict)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    on_progress: ProgressCallback | None = None

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must not be negative, got {self.retry_delay}")
        frozen_fields = MappingProxyType({k: str(v) for k, v in self.form_fields.items()})
        object.__setattr__(self, "form_fields", frozen_fields)

    @classmethod
    def from_config(
        cls,
        source: UploadSource,
        config: TransferConfig,
        form_fields: Mapping[str, str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TransferRequest:
        """Create a request using the tunables of a TransferConfig."""
        return cls(
            source=source,
            form_fields=form_fields or {},
            chunk_size=config.chunk_size,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            on_progress=on_progress,
        )


@dataclass
class TransferResult:
    """Result of a completed transfer.

    Attributes:
        mode: How the source was sent.
        body: Response body of the direct or finalize request, unmodified.
        upload_id: Session id (chunked mode only).
        total_chunks: Number of chunks sent (0 in direct mode).
        bytes_sent: Bytes confirmed by the server.
        retries: Retries needed across all chunks.
    """

    mode: TransferMode
    body: Any
    upload_id: str | None = None
    total_chunks: int = 0
    bytes_sent: int = 0
    retries: int = 0
