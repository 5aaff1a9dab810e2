"""Progress tracking for transfers.

This module provides:
- ProgressTracker: Aggregates confirmed and in-flight bytes, never regresses
- ProgressReader: File-like payload reporting how much the transport has read
"""

from __future__ import annotations

import io
from collections.abc import Callable

from chunkup.client.transfer.types import ProgressCallback, TransferProgress


class ProgressTracker:
    """Tracks cumulative progress of one transfer.

    Confirmed bytes only grow when the server acknowledges a request.
    In-flight bytes of the current attempt are added on top of them without
    being stored, so a failed attempt never counts. The reported value is a
    high-water mark: it never goes down, even when a retry restarts from zero.
    """

    def __init__(self, total: int, callback: ProgressCallback | None = None) -> None:
        self._total = total
        self._callback = callback
        self._confirmed = 0
        self._reported = 0

    @property
    def confirmed(self) -> int:
        """Bytes acknowledged by the server so far."""
        return self._confirmed

    @property
    def snapshot(self) -> TransferProgress:
        """Last reported progress."""
        return TransferProgress(bytes_loaded=self._reported, bytes_total=self._total)

    @property
    def percent(self) -> int:
        """Last reported percentage."""
        return self.snapshot.percent

    @property
    def confirmed_percent(self) -> int:
        """Percentage of bytes acknowledged by the server."""
        return TransferProgress(bytes_loaded=self._confirmed, bytes_total=self._total).percent

    def in_flight(self, loaded: int) -> None:
        """Report bytes read so far by the transport for the current attempt."""
        self._report(self._confirmed + loaded)

    def confirm(self, nbytes: int) -> None:
        """Record bytes acknowledged by the server."""
        self._confirmed = min(self._confirmed + nbytes, self._total)
        self._report(self._confirmed)

    def _report(self, loaded: int) -> None:
        self._reported = max(self._reported, min(loaded, self._total))
        if self._callback:
            progress = self.snapshot
            self._callback(progress.percent, progress.bytes_loaded, progress.bytes_total)


class ProgressReader(io.BytesIO):
    """In-memory payload that reports every read to a listener.

    httpx streams multipart file parts by calling read() repeatedly, so each
    read is a transport progress tick. The listener receives the number of
    bytes read since the last rewind, which restarts at zero on every attempt.
    """

    def __init__(self, data: bytes, listener: Callable[[int], None]) -> None:
        super().__init__(data)
        self._listener = listener

    def read(self, size: int | None = -1) -> bytes:
        data = super().read(size)
        if data:
            self._listener(self.tell())
        return data
