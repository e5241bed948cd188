"""Tests for complai/retry.py"""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from complai.retry import backoff_delay, retry_with_backoff


class TestBackoffDelay:
    def test_doubles_each_attempt(self):
        assert [backoff_delay(i, 1.0, 60.0) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_caps_at_max_delay(self):
        assert backoff_delay(10, 1.0, 3.0) == 3.0


class TestRetryWithBackoff:
    def test_succeeds_first_try(self):
        @retry_with_backoff(max_retries=3)
        def succeed():
            return "ok"

        assert succeed() == "ok"

    def test_fails_then_succeeds(self):
        call_count = 0

        @retry_with_backoff(max_retries=3, base_delay=0.01)
        def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError("transient error")
            return "ok"

        assert flaky() == "ok"
        assert call_count == 3

    def test_exhausts_retries(self):
        call_count = 0

        @retry_with_backoff(max_retries=2, base_delay=0.01)
        def always_fail():
            nonlocal call_count
            call_count += 1
            raise RuntimeError("permanent error")

        with pytest.raises(RuntimeError, match="permanent error"):
            always_fail()
        assert call_count == 3

    def test_only_catches_specified_exceptions(self):
        @retry_with_backoff(max_retries=3, retryable_exceptions=(ValueError,))
        def raise_type_error():
            raise TypeError("wrong type")

        with pytest.raises(TypeError):
            raise_type_error()

    def test_delay_caps_at_max_delay(self):
        @retry_with_backoff(max_retries=5, base_delay=1.0, max_delay=3.0)
        def always_fail():
            raise ValueError("fail")

        with patch("complai.retry.time.sleep") as mock_sleep:
            with pytest.raises(ValueError):
                always_fail()

            assert mock_sleep.call_count == 5
            for call in mock_sleep.call_args_list:
                delay = call[0][0]
                assert delay <= 3.0

    def test_logging(self, caplog):
        @retry_with_backoff(max_retries=2, base_delay=0.01)
        def fail_once():
            if not hasattr(fail_once, "_called"):
                fail_once._called = True
                raise ValueError("retry me")
            return "ok"

        with caplog.at_level(logging.WARNING, logger="complai.retry"):
            fail_once()

        assert "Retry 1/2 for fail_once" in caplog.text


class TestAsyncRetry:
    @pytest.mark.asyncio
    async def test_coroutine_is_awaited_and_retried(self):
        call_count = 0

        @retry_with_backoff(max_retries=2, base_delay=1.0)
        async def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ConnectionError("reset")
            return "ok"

        with patch("complai.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            assert await flaky() == "ok"

        assert call_count == 2
        mock_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_coroutine_exhausts_retries(self):
        @retry_with_backoff(max_retries=1, base_delay=0.01, retryable_exceptions=(ConnectionError,))
        async def always_fail():
            raise ConnectionError("down")

        with patch("complai.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(ConnectionError, match="down"):
                await always_fail()

    @pytest.mark.asyncio
    async def test_wrapper_keeps_name(self):
        @retry_with_backoff()
        async def fetch_reply():
            return "ok"

        assert fetch_reply.__name__ == "fetch_reply"
        assert await fetch_reply() == "ok"
