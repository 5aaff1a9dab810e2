"""Tests for transfer mode selection and chunk planning."""

import math
from pathlib import Path

import pytest

from chunkup.core.planning import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CHUNK_THRESHOLD,
    TransferMode,
    count_chunks,
    decide_transfer_mode,
    plan_chunks,
    should_use_chunked_upload,
)
from chunkup.core.source import UploadSource


class TestDefaults:
    """Tests for planning constants."""

    def test_default_sizes(self) -> None:
        """Verify default sizes are correct."""
        assert DEFAULT_CHUNK_SIZE == 1 * 1024 * 1024  # 1 MB
        assert DEFAULT_CHUNK_THRESHOLD == 2 * 1024 * 1024  # 2 MB


class TestDecideTransferMode:
    """Tests for decide_transfer_mode."""

    def test_at_threshold_is_direct(self) -> None:
        """A source exactly at the threshold goes direct."""
        assert decide_transfer_mode(2_000_000, 2_000_000) is TransferMode.DIRECT

    def test_above_threshold_is_chunked(self) -> None:
        """One byte over the threshold is chunked."""
        assert decide_transfer_mode(2_000_001, 2_000_000) is TransferMode.CHUNKED

    def test_small_source_is_direct(self) -> None:
        """500 kB with a 2 MB threshold is direct."""
        assert decide_transfer_mode(500_000, 2_000_000) is TransferMode.DIRECT

    def test_default_threshold(self) -> None:
        """Default threshold should be 2 MiB."""
        assert decide_transfer_mode(DEFAULT_CHUNK_THRESHOLD) is TransferMode.DIRECT
        assert decide_transfer_mode(DEFAULT_CHUNK_THRESHOLD + 1) is TransferMode.CHUNKED


class TestShouldUseChunkedUpload:
    """Tests for the caller-facing helper."""

    def test_accepts_bytes(self) -> None:
        """Should work on raw bytes."""
        assert should_use_chunked_upload(b"x" * 11, threshold=10) is True
        assert should_use_chunked_upload(b"x" * 10, threshold=10) is False

    def test_accepts_path(self, tmp_path: Path) -> None:
        """Should read the size of a file path."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"x" * 100)
        assert should_use_chunked_upload(path, threshold=99) is True
        assert should_use_chunked_upload(str(path), threshold=100) is False

    def test_accepts_upload_source(self) -> None:
        """Should use the size of an UploadSource."""
        source = UploadSource.from_bytes(b"x" * 5, "a.txt")
        assert should_use_chunked_upload(source, threshold=4) is True


class TestPlanChunks:
    """Tests for plan_chunks."""

    def test_exact_multiple(self) -> None:
        """5,000,000 bytes in 1,000,000-byte chunks gives five full chunks."""
        chunks = plan_chunks(5_000_000, 1_000_000)
        assert [c.size for c in chunks] == [1_000_000] * 5
        assert [c.is_last for c in chunks] == [False, False, False, False, True]

    def test_remainder_in_last_chunk(self) -> None:
        """1,500,000 bytes gives [1000000, 500000]."""
        chunks = plan_chunks(1_500_000, 1_000_000)
        assert [c.size for c in chunks] == [1_000_000, 500_000]
        assert chunks[1].offset == 1_000_000
        assert chunks[1].is_last

    def test_empty_source_has_no_chunks(self) -> None:
        """A zero-byte source yields zero chunks."""
        assert plan_chunks(0, 1024) == []

    def test_single_byte(self) -> None:
        """A one-byte source is a single last chunk."""
        chunks = plan_chunks(1, 1024)
        assert len(chunks) == 1
        assert chunks[0].size == 1
        assert chunks[0].is_last

    @pytest.mark.parametrize(
        ("size", "chunk_size"),
        [(1, 1), (7, 3), (1023, 1024), (1025, 1024), (10_000_019, 65_536)],
    )
    def test_partition_is_exact(self, size: int, chunk_size: int) -> None:
        """Chunks cover [0, size) with no gaps or overlaps."""
        chunks = plan_chunks(size, chunk_size)

        assert len(chunks) == math.ceil(size / chunk_size)
        assert sum(c.size for c in chunks) == size
        offset = 0
        for i, chunk in enumerate(chunks):
            assert chunk.index == i
            assert chunk.offset == offset
            offset = chunk.end
        assert all(c.size == chunk_size for c in chunks[:-1])

    def test_rejects_non_positive_chunk_size(self) -> None:
        """chunk_size must be > 0."""
        with pytest.raises(ValueError):
            plan_chunks(10, 0)
        with pytest.raises(ValueError):
            plan_chunks(10, -1)

    def test_rejects_negative_size(self) -> None:
        """size must not be negative."""
        with pytest.raises(ValueError):
            plan_chunks(-1, 10)

    def test_count_chunks(self) -> None:
        """count_chunks should be ceil(size / chunk_size)."""
        assert count_chunks(0, 10) == 0
        assert count_chunks(10, 10) == 1
        assert count_chunks(11, 10) == 2
