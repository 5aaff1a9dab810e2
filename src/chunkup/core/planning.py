"""Transfer planning for chunkup.

This module provides:
- TransferMode: direct (single request) or chunked upload
- decide_transfer_mode / should_use_chunked_upload: mode selection
- plan_chunks: fixed-size partitioning of a source into ordered chunks
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chunkup.core.source import UploadSource

# Chunk size configuration (in bytes)
DEFAULT_CHUNK_SIZE = 1 * 1024 * 1024       # 1 MB
DEFAULT_CHUNK_THRESHOLD = 2 * 1024 * 1024  # 2 MB


class TransferMode(str, Enum):
    """How a source is sent to the server."""

    DIRECT = "direct"
    CHUNKED = "chunked"


@dataclass(frozen=True)
class Chunk:
    """A contiguous byte range of an upload source."""

    index: int
    offset: int
    size: int
    is_last: bool

    @property
    def end(self) -> int:
        """Return the exclusive end offset of this chunk."""
        return self.offset + self.size


def decide_transfer_mode(
    size: int, threshold: int = DEFAULT_CHUNK_THRESHOLD
) -> TransferMode:
    """Pick the transfer mode for a source of the given size.

    Args:
        size: Source size in bytes.
        threshold: Largest size still sent as a single request.

    Returns:
        TransferMode.DIRECT if size <= threshold, else TransferMode.CHUNKED.
    """
    if size <= threshold:
        return TransferMode.DIRECT
    return TransferMode.CHUNKED


def should_use_chunked_upload(
    source: UploadSource | Path | str | bytes,
    threshold: int = DEFAULT_CHUNK_THRESHOLD,
) -> bool:
    """Check whether a source is large enough to need a chunked upload.

    Args:
        source: UploadSource, file path or raw bytes.
        threshold: Size threshold in bytes (default: 2MB).

    Returns:
        True if chunked upload should be used.
    """
    if isinstance(source, (bytes, bytearray)):
        size = len(source)
    elif isinstance(source, (str, Path)):
        size = Path(source).stat().st_size
    else:
        size = source.size
    return decide_transfer_mode(size, threshold) is TransferMode.CHUNKED


def count_chunks(size: int, chunk_size: int) -> int:
    """Return the number of chunks needed for size bytes."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return -(-size // chunk_size)


def plan_chunks(size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[Chunk]:
    """Partition a source of the given size into ordered chunks.

    Every chunk except the last is exactly chunk_size bytes. An empty
    source yields no chunks.

    Args:
        size: Source size in bytes.
        chunk_size: Size of each chunk in bytes (must be > 0).

    Returns:
        Chunks covering [0, size) in ascending index order.

    Raises:
        ValueError: If chunk_size is not positive or size is negative.
    """
    if size < 0:
        raise ValueError(f"size must not be negative, got {size}")
    total = count_chunks(size, chunk_size)

    chunks: list[Chunk] = []
    for index in range(total):
        offset = index * chunk_size
        chunks.append(Chunk(
            index=index,
            offset=offset,
            size=min(chunk_size, size - offset),
            is_last=index == total - 1,
        ))
    return chunks
