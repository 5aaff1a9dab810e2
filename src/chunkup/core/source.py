"""Byte sources for uploads.

An UploadSource gives the uploader a name, a MIME type, a size and ranged
reads, whether the data lives in a file or in memory.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(name: str) -> str:
    """Guess a MIME type from a file name."""
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class UploadSource:
    """A file or in-memory payload to upload.

    Attributes:
        name: File name sent to the server.
        content_type: MIME type sent to the server.
        size: Total size in bytes.
        path: Backing file, if any.
        data: Backing bytes, if any.
    """

    name: str
    content_type: str
    size: int
    path: Path | None = None
    data: bytes | None = None

    @classmethod
    def from_path(
        cls, path: Path | str, content_type: str | None = None
    ) -> UploadSource:
        """Create a source backed by a file on disk.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return cls(
            name=path.name,
            content_type=content_type or guess_content_type(path.name),
            size=path.stat().st_size,
            path=path,
        )

    @classmethod
    def from_bytes(
        cls, data: bytes, name: str, content_type: str | None = None
    ) -> UploadSource:
        """Create a source backed by an in-memory payload."""
        return cls(
            name=name,
            content_type=content_type or guess_content_type(name),
            size=len(data),
            data=bytes(data),
        )

    def read(self, offset: int = 0, length: int | None = None) -> bytes:
        """Read length bytes starting at offset (to the end if None)."""
        if length is None:
            length = self.size - offset
        if self.data is not None:
            return self.data[offset : offset + length]
        if self.path is None:
            raise ValueError(f"Source {self.name} has no backing data")
        with open(self.path, "rb") as f:
            f.seek(offset)
            return f.read(length)
