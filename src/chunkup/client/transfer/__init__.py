"""Reliable file transfer to an upload endpoint.

Architecture:
    Planner → FileUploader → (chunk, chunk, ... , finalize)

Components:
- **FileUploader**: Direct or chunked upload with retry, progress and finalize
- **retry_with_backoff**: Exponential backoff loop used for chunk attempts
- **ProgressTracker / ProgressReader**: Monotonic progress from transport reads
- **UploadSession**: Upload id and file metadata shared by all chunk requests

All public symbols are re-exported here.
"""

from chunkup.client.transfer.progress import ProgressReader, ProgressTracker
from chunkup.client.transfer.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    backoff_delay,
    retry_with_backoff,
)
from chunkup.client.transfer.session import UploadSession, generate_upload_id
from chunkup.client.transfer.types import (
    ChunkUploadError,
    FinalizeError,
    ProgressCallback,
    StateCallback,
    TransferCancelledError,
    TransferError,
    TransferProgress,
    TransferRequest,
    TransferResult,
    TransferState,
)
from chunkup.client.transfer.uploader import FileUploader

__all__ = [
    # Uploader
    "FileUploader",
    # Retry
    "DEFAULT_BACKOFF_MULTIPLIER",
    "backoff_delay",
    "retry_with_backoff",
    # Progress
    "ProgressReader",
    "ProgressTracker",
    # Session
    "UploadSession",
    "generate_upload_id",
    # Types
    "ChunkUploadError",
    "FinalizeError",
    "ProgressCallback",
    "StateCallback",
    "TransferCancelledError",
    "TransferError",
    "TransferProgress",
    "TransferRequest",
    "TransferResult",
    "TransferState",
]
