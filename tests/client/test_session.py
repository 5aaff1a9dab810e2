"""Tests for upload sessions."""

import string
import threading

from chunkup.client.transfer.session import UploadSession, generate_upload_id


class TestGenerateUploadId:
    """Tests for generate_upload_id."""

    def test_base36_characters(self) -> None:
        """Ids should only contain lowercase base-36 characters."""
        upload_id = generate_upload_id()
        assert upload_id
        assert set(upload_id) <= set(string.digits + string.ascii_lowercase)

    def test_unique_across_threads(self) -> None:
        """Concurrent generation should not produce duplicates."""
        ids: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [generate_upload_id() for _ in range(200)]
            with lock:
                ids.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 1600
        assert len(set(ids)) == len(ids)


class TestUploadSession:
    """Tests for UploadSession."""

    def test_form_fields(self) -> None:
        """Session form fields should use the wire names."""
        session = UploadSession(
            upload_id="abc123",
            file_name="video.mp4",
            file_type="video/mp4",
            file_size=5_000_000,
            total_chunks=5,
        )
        assert session.form_fields() == {
            "uploadId": "abc123",
            "fileName": "video.mp4",
            "fileType": "video/mp4",
            "fileSize": "5000000",
        }
