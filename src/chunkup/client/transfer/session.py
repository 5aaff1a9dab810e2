"""Upload sessions for chunked transfers.

A session ties every chunk request and the finalize request of one transfer
together through a client-generated upload id.
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass

_BASE36 = string.digits + string.ascii_lowercase
UPLOAD_ID_RANDOM_LENGTH = 7


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_upload_id() -> str:
    """Generate a best-effort unique upload id.

    Millisecond timestamp in base 36 followed by random base-36 characters.
    Safe to call from several threads at once.
    """
    timestamp = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(UPLOAD_ID_RANDOM_LENGTH))
    return timestamp + suffix


@dataclass(frozen=True)
class UploadSession:
    """Identifies one chunked transfer end-to-end."""

    upload_id: str
    file_name: str
    file_type: str
    file_size: int
    total_chunks: int

    def form_fields(self) -> dict[str, str]:
        """Session fields sent with every chunk request."""
        return {
            "uploadId": self.upload_id,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "fileSize": str(self.file_size),
        }
