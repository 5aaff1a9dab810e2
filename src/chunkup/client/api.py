"""HTTP client for the upload server API.

This module provides:
- HTTPClient: HTTP client speaking the chunked-upload wire contract
- Direct, chunk, finalize and abort requests
- APIError hierarchy for non-2xx responses
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import IO, TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from chunkup.client.transfer.session import UploadSession
    from chunkup.core.config import ServerConfig
    from chunkup.core.planning import Chunk

logger = logging.getLogger(__name__)

FILE_FIELD = "file"


class APIError(Exception):
    """Base exception for API errors (non-2xx responses)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Authentication failed."""


class NotFoundError(APIError):
    """Resource not found."""


# Everything a single request attempt can fail with
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (httpx.RequestError, APIError)


def response_body(response: httpx.Response) -> Any:
    """Return the response body: parsed JSON when the server sent JSON, else text."""
    if not response.content:
        return None
    content_type = response.headers.get("Content-Type", "")
    if "json" in content_type:
        return response.json()
    return response.text


def _error_detail(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or default
    if isinstance(data, dict):
        return str(data.get("detail") or data.get("message") or data.get("error") or default)
    return default


class HTTPClient:
    """HTTP client for the upload server API."""

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the client.

        Args:
            config: Server connection settings.
        """
        headers = {}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.Client(
            base_url=config.server_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers=headers,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise the matching APIError for any non-2xx response."""
        if response.is_success:
            return response
        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(_error_detail(response, "Invalid or expired token"), status)
        if status == 404:
            raise NotFoundError(_error_detail(response, "Resource not found"), status)
        raise APIError(_error_detail(response, f"HTTP {status}"), status)

    # === Upload operations ===

    def upload_direct(
        self,
        url: str,
        form_fields: Mapping[str, str],
        file_name: str,
        content_type: str,
        payload: IO[bytes],
        timeout: float,
    ) -> httpx.Response:
        """Upload a whole file in a single multipart request.

        Args:
            url: Upload endpoint (absolute, or relative to the server URL).
            form_fields: Caller form fields sent alongside the file.
            file_name: File name reported in the multipart part.
            content_type: MIME type of the file part.
            payload: File-like object holding the bytes to send.
            timeout: Request timeout in seconds.

        Returns:
            The successful response.

        Raises:
            APIError: On a non-2xx response.
            httpx.RequestError: On network failure or timeout.
        """
        return self._handle_response(
            self._client.post(
                url,
                data=dict(form_fields),
                files={FILE_FIELD: (file_name, payload, content_type)},
                timeout=timeout,
            )
        )

    def upload_chunk(
        self,
        url: str,
        form_fields: Mapping[str, str],
        session: UploadSession,
        chunk: Chunk,
        payload: IO[bytes],
        timeout: float,
    ) -> httpx.Response:
        """Upload one chunk of a chunked transfer to <url>/chunk.

        Args:
            url: Upload endpoint the chunk route hangs off.
            form_fields: Caller form fields sent with every chunk.
            session: Session the chunk belongs to.
            chunk: Chunk being sent.
            payload: File-like object holding the chunk bytes.
            timeout: Request timeout in seconds.

        Returns:
            The successful response.
        """
        data = {
            **form_fields,
            **session.form_fields(),
            "chunkIndex": str(chunk.index),
            "totalChunks": str(session.total_chunks),
        }
        headers = {
            "X-Chunk-Upload": "true",
            "X-Chunk-Index": str(chunk.index),
            "X-Total-Chunks": str(session.total_chunks),
        }
        return self._handle_response(
            self._client.post(
                f"{url.rstrip('/')}/chunk",
                data=data,
                files={FILE_FIELD: (session.file_name, payload, session.file_type)},
                headers=headers,
                timeout=timeout,
            )
        )

    def finalize_upload(self, url: str, session: UploadSession) -> httpx.Response:
        """Ask the server to reassemble all chunks of a session.

        Uses the client's default timeout.
        """
        return self._handle_response(
            self._client.post(
                f"{url.rstrip('/')}/finalize",
                json={
                    "uploadId": session.upload_id,
                    "fileName": session.file_name,
                    "totalChunks": session.total_chunks,
                },
            )
        )

    def abort_upload(self, url: str, upload_id: str) -> None:
        """Tell the server a chunked transfer was abandoned."""
        self._handle_response(self._client.delete(f"{url.rstrip('/')}/{upload_id}"))
