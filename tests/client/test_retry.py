"""Tests for exponential backoff retry."""

from unittest.mock import patch

import pytest

from chunkup.client.transfer.retry import backoff_delay, retry_with_backoff


class TestBackoffDelay:
    """Tests for backoff_delay."""

    def test_doubles_each_retry(self) -> None:
        """Delay before retry n should be base * 2^(n-1)."""
        assert backoff_delay(1, initial_backoff=2.0) == 2.0
        assert backoff_delay(2, initial_backoff=2.0) == 4.0
        assert backoff_delay(3, initial_backoff=2.0) == 8.0

    def test_respects_cap(self) -> None:
        """Delay should not exceed max_backoff."""
        assert backoff_delay(10, initial_backoff=1.0, max_backoff=5.0) == 5.0


class TestRetryWithBackoff:
    """Tests for retry_with_backoff function."""

    def test_succeeds_on_first_try(self) -> None:
        """Should return result when function succeeds first try."""
        counter = {"calls": 0}

        def succeed() -> str:
            counter["calls"] += 1
            return "success"

        with patch("chunkup.client.transfer.retry.time.sleep") as mock_sleep:
            result = retry_with_backoff(succeed, max_retries=3)

        assert result == "success"
        assert counter["calls"] == 1
        mock_sleep.assert_not_called()

    def test_retries_on_failure(self) -> None:
        """Should retry on failure and eventually succeed."""
        counter = {"calls": 0}

        def fail_twice() -> str:
            counter["calls"] += 1
            if counter["calls"] < 3:
                raise ConnectionError("Network error")
            return "success"

        with patch("chunkup.client.transfer.retry.time.sleep"):
            result = retry_with_backoff(
                fail_twice,
                max_retries=5,
                retryable_exceptions=(ConnectionError,),
            )

        assert result == "success"
        assert counter["calls"] == 3

    def test_raises_after_max_retries(self) -> None:
        """Should raise the last error after max_retries + 1 attempts."""
        counter = {"calls": 0}

        def always_fail() -> str:
            counter["calls"] += 1
            raise TimeoutError("Timeout")

        with patch("chunkup.client.transfer.retry.time.sleep"), pytest.raises(
            TimeoutError, match="Timeout"
        ):
            retry_with_backoff(
                always_fail,
                max_retries=3,
                retryable_exceptions=(TimeoutError,),
            )

        assert counter["calls"] == 4  # Initial + 3 retries

    def test_zero_retries_means_single_attempt(self) -> None:
        """max_retries=0 should try exactly once."""
        counter = {"calls": 0}

        def always_fail() -> str:
            counter["calls"] += 1
            raise OSError("down")

        with patch("chunkup.client.transfer.retry.time.sleep") as mock_sleep, pytest.raises(OSError):
            retry_with_backoff(always_fail, max_retries=0, retryable_exceptions=(OSError,))

        assert counter["calls"] == 1
        mock_sleep.assert_not_called()

    def test_does_not_retry_non_retryable_exceptions(self) -> None:
        """Should not retry exceptions not in retryable list."""
        counter = {"calls": 0}

        def raise_value_error() -> str:
            counter["calls"] += 1
            raise ValueError("Invalid value")

        with pytest.raises(ValueError, match="Invalid value"):
            retry_with_backoff(
                raise_value_error,
                max_retries=3,
                retryable_exceptions=(ConnectionError,),
            )

        assert counter["calls"] == 1

    def test_exponential_backoff(self) -> None:
        """Should wait 2s then 4s with the default base delay."""
        sleep_times: list[float] = []
        counter = {"calls": 0}

        def fail_twice() -> str:
            counter["calls"] += 1
            if counter["calls"] < 3:
                raise OSError("Error")
            return "success"

        with patch("chunkup.client.transfer.retry.time.sleep") as mock_sleep:
            mock_sleep.side_effect = lambda t: sleep_times.append(t)
            retry_with_backoff(fail_twice, max_retries=3, retryable_exceptions=(OSError,))

        assert sleep_times == [2.0, 4.0]

    def test_on_retry_called_before_each_wait(self) -> None:
        """on_retry should receive the retry number, error and delay."""
        calls: list[tuple[int, str, float]] = []
        counter = {"calls": 0}

        def fail_twice() -> str:
            counter["calls"] += 1
            if counter["calls"] < 3:
                raise OSError(f"failure {counter['calls']}")
            return "ok"

        with patch("chunkup.client.transfer.retry.time.sleep"):
            retry_with_backoff(
                fail_twice,
                max_retries=3,
                initial_backoff=0.5,
                retryable_exceptions=(OSError,),
                on_retry=lambda n, e, d: calls.append((n, str(e), d)),
            )

        assert calls == [(1, "failure 1", 0.5), (2, "failure 2", 1.0)]
