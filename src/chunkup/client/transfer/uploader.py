"""File upload, direct or in chunks.

This module provides:
- FileUploader: Sends a source in one request or as ordered, retried chunks
  followed by a finalize request
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from chunkup.client.api import TRANSPORT_ERRORS, response_body
from chunkup.client.transfer.progress import ProgressReader, ProgressTracker
from chunkup.client.transfer.retry import retry_with_backoff
from chunkup.client.transfer.session import UploadSession, generate_upload_id
from chunkup.client.transfer.types import (
    ChunkUploadError,
    FinalizeError,
    StateCallback,
    TransferCancelledError,
    TransferRequest,
    TransferResult,
    TransferState,
)
from chunkup.core.config import DEFAULT_CHUNK_TIMEOUT, DEFAULT_DIRECT_TIMEOUT
from chunkup.core.planning import (
    Chunk,
    TransferMode,
    decide_transfer_mode,
    plan_chunks,
)

if TYPE_CHECKING:
    from chunkup.client.api import HTTPClient
    from chunkup.core.config import TransferConfig

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


class FileUploader:
    """Uploads files to an endpoint, splitting large ones into chunks.

    Chunks are sent strictly in order; chunk i+1 is never sent before
    chunk i was acknowledged. The uploader holds no per-transfer state, so
    one instance can serve several transfers from different threads.
    """

    def __init__(
        self,
        client: HTTPClient,
        direct_timeout: float = DEFAULT_DIRECT_TIMEOUT,
        chunk_timeout: float = DEFAULT_CHUNK_TIMEOUT,
        notify_abort: bool = False,
        state_callback: StateCallback | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            client: HTTP client for server communication.
            direct_timeout: Timeout of a direct upload request in seconds.
            chunk_timeout: Timeout of each chunk request in seconds.
            notify_abort: Send DELETE <url>/<uploadId> when a chunked
                transfer is aborted or cancelled.
            state_callback: Optional callback for state transitions.
        """
        self._client = client
        self._direct_timeout = direct_timeout
        self._chunk_timeout = chunk_timeout
        self._notify_abort = notify_abort
        self._state_callback = state_callback

    @classmethod
    def from_config(
        cls,
        client: HTTPClient,
        config: TransferConfig,
        state_callback: StateCallback | None = None,
    ) -> FileUploader:
        """Create an uploader using the timeouts of a TransferConfig."""
        return cls(
            client,
            direct_timeout=config.direct_timeout,
            chunk_timeout=config.chunk_timeout,
            notify_abort=config.notify_abort,
            state_callback=state_callback,
        )

    def upload(
        self,
        url: str,
        request: TransferRequest,
        cancel_check: CancelCheck | None = None,
    ) -> TransferResult:
        """Upload a source, choosing direct or chunked mode from its size.

        Sources no larger than request.chunk_size are sent directly.

        Args:
            url: Upload endpoint (absolute, or relative to the server URL).
            request: What to upload and how.
            cancel_check: Optional function returning True to stop before
                the next request.

        Returns:
            TransferResult with the server's response body.

        Raises:
            ChunkUploadError: If a chunk fails after all retries.
            FinalizeError: If the finalize request fails.
            TransferCancelledError: If the transfer is cancelled.
            APIError, httpx.RequestError: If a direct upload fails.
            OSError: If the source cannot be read.
        """
        mode = decide_transfer_mode(request.source.size, request.chunk_size)
        if mode is TransferMode.DIRECT:
            return self.upload_direct(url, request, cancel_check)
        return self.upload_chunked(url, request, cancel_check)

    def upload_direct(
        self,
        url: str,
        request: TransferRequest,
        cancel_check: CancelCheck | None = None,
    ) -> TransferResult:
        """Upload the whole source in a single request, without retry.

        Transport errors propagate unchanged.
        """
        source = request.source
        self._transition(TransferState.PLANNING)
        tracker = ProgressTracker(source.size, request.on_progress)
        logger.info(
            f"File size ({source.size} bytes) is small enough for direct upload "
            f"of {source.name}"
        )

        self._check_cancelled(cancel_check, tracker, f"Upload of {source.name} cancelled")
        payload = ProgressReader(source.read(), tracker.in_flight)

        self._transition(TransferState.IN_FLIGHT)
        try:
            response = self._client.upload_direct(
                url,
                request.form_fields,
                source.name,
                source.content_type,
                payload,
                timeout=self._direct_timeout,
            )
        except TRANSPORT_ERRORS as e:
            logger.error(f"Direct upload of {source.name} failed: {e}")
            self._transition(TransferState.FAILED)
            raise

        tracker.confirm(source.size)
        self._transition(TransferState.DONE)
        logger.info(f"Uploaded {source.name} ({source.size} bytes)")

        return TransferResult(
            mode=TransferMode.DIRECT,
            body=response_body(response),
            bytes_sent=source.size,
        )

    def upload_chunked(
        self,
        url: str,
        request: TransferRequest,
        cancel_check: CancelCheck | None = None,
    ) -> TransferResult:
        """Upload the source as ordered chunks, then ask the server to finalize.

        An empty source sends no request at all and reports 100%.
        """
        source = request.source
        self._transition(TransferState.PLANNING)
        chunks = plan_chunks(source.size, request.chunk_size)
        session = UploadSession(
            upload_id=generate_upload_id(),
            file_name=source.name,
            file_type=source.content_type,
            file_size=source.size,
            total_chunks=len(chunks),
        )
        tracker = ProgressTracker(source.size, request.on_progress)

        if not chunks:
            logger.info(f"{source.name} is empty, nothing to upload")
            tracker.confirm(0)
            self._transition(TransferState.DONE)
            return TransferResult(
                mode=TransferMode.CHUNKED,
                body=None,
                upload_id=session.upload_id,
            )

        logger.info(
            f"Splitting {source.name} ({source.size} bytes) into {len(chunks)} chunks "
            f"(upload {session.upload_id})"
        )

        retries = 0
        try:
            for chunk in chunks:
                retries += self._upload_chunk_with_retry(
                    url, request, session, chunk, tracker, cancel_check
                )
            self._check_cancelled(
                cancel_check, tracker, f"Upload of {source.name} cancelled before finalize"
            )
        except (ChunkUploadError, TransferCancelledError):
            self._send_abort(url, session)
            raise
        except Exception as e:
            logger.error(f"Upload {session.upload_id} of {source.name} failed: {e}")
            self._transition(TransferState.FAILED)
            self._send_abort(url, session)
            raise

        self._transition(TransferState.FINALIZING)
        try:
            response = self._client.finalize_upload(url, session)
        except TRANSPORT_ERRORS as e:
            logger.error(f"Finalize of upload {session.upload_id} failed: {e}")
            self._transition(TransferState.FAILED)
            raise FinalizeError(session.upload_id, str(e), tracker.confirmed_percent) from e

        self._transition(TransferState.DONE)
        logger.info(
            f"Uploaded {source.name}: {len(chunks)} chunks, {retries} retries "
            f"(upload {session.upload_id})"
        )

        return TransferResult(
            mode=TransferMode.CHUNKED,
            body=response_body(response),
            upload_id=session.upload_id,
            total_chunks=len(chunks),
            bytes_sent=tracker.confirmed,
            retries=retries,
        )

    def _upload_chunk_with_retry(
        self,
        url: str,
        request: TransferRequest,
        session: UploadSession,
        chunk: Chunk,
        tracker: ProgressTracker,
        cancel_check: CancelCheck | None,
    ) -> int:
        """Upload a chunk, retrying with exponential backoff.

        Returns:
            Number of retries that were needed.

        Raises:
            ChunkUploadError: If every attempt failed.
            TransferCancelledError: If cancelled before an attempt.
        """
        data = request.source.read(chunk.offset, chunk.size)
        label = f"chunk {chunk.index + 1}/{session.total_chunks}"
        retries = 0

        def do_upload() -> None:
            self._check_cancelled(
                cancel_check,
                tracker,
                f"Upload of {session.file_name} cancelled at {label}",
            )
            self._transition(TransferState.CHUNK_UPLOADING)
            payload = ProgressReader(data, tracker.in_flight)
            self._client.upload_chunk(
                url,
                request.form_fields,
                session,
                chunk,
                payload,
                timeout=self._chunk_timeout,
            )

        def on_retry(retry: int, error: Exception, delay: float) -> None:
            nonlocal retries
            retries = retry
            self._transition(TransferState.BACKOFF)

        try:
            retry_with_backoff(
                do_upload,
                max_retries=request.max_retries,
                initial_backoff=request.retry_delay,
                retryable_exceptions=TRANSPORT_ERRORS,
                on_retry=on_retry,
            )
        except TRANSPORT_ERRORS as e:
            attempts = request.max_retries + 1
            logger.error(f"Giving up on {label} of upload {session.upload_id}: {e}")
            self._transition(TransferState.ABORTED)
            raise ChunkUploadError(
                chunk.index, session.total_chunks, attempts, tracker.confirmed_percent
            ) from e

        tracker.confirm(chunk.size)
        logger.debug(f"Uploaded {label} ({chunk.size} bytes) of upload {session.upload_id}")
        return retries

    def _check_cancelled(
        self,
        cancel_check: CancelCheck | None,
        tracker: ProgressTracker,
        message: str,
    ) -> None:
        if cancel_check and cancel_check():
            logger.info(message)
            self._transition(TransferState.CANCELLED)
            raise TransferCancelledError(message, tracker.confirmed_percent)

    def _send_abort(self, url: str, session: UploadSession) -> None:
        """Send the abort notification if enabled; its failure is only logged."""
        if not self._notify_abort:
            return
        try:
            self._client.abort_upload(url, session.upload_id)
            logger.info(f"Notified server of aborted upload {session.upload_id}")
        except TRANSPORT_ERRORS as e:
            logger.warning(f"Could not notify server of aborted upload {session.upload_id}: {e}")

    def _transition(self, state: TransferState) -> None:
        logger.debug(f"Transfer state -> {state.name}")
        if self._state_callback:
            self._state_callback(state)
