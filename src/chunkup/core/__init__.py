"""Core module - Transfer planning, byte sources and configuration."""

from chunkup.core.config import (
    DEFAULT_CHUNK_TIMEOUT,
    DEFAULT_DIRECT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    ServerConfig,
    TransferConfig,
)
from chunkup.core.planning import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CHUNK_THRESHOLD,
    Chunk,
    TransferMode,
    count_chunks,
    decide_transfer_mode,
    plan_chunks,
    should_use_chunked_upload,
)
from chunkup.core.source import UploadSource, guess_content_type

__all__ = [
    # Planning
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CHUNK_THRESHOLD",
    "Chunk",
    "TransferMode",
    "count_chunks",
    "decide_transfer_mode",
    "plan_chunks",
    "should_use_chunked_upload",
    # Config
    "DEFAULT_CHUNK_TIMEOUT",
    "DEFAULT_DIRECT_TIMEOUT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_DELAY",
    "ServerConfig",
    "TransferConfig",
    # Sources
    "UploadSource",
    "guess_content_type",
]
