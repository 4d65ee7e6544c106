"""Tests for retry logic and error classification."""
import asyncio
from unittest.mock import patch

import pytest

from pywolfsmartset.exceptions import DecodeError, ProtocolError, TransportError
from pywolfsmartset.retry import (
    async_retry_with_backoff,
    is_auth_error,
    is_retryable_error,
)


class TestErrorClassification:
    """Test error classification functions."""

    def test_is_retryable_transport_errors(self):
        """Test that transport errors and timeouts are retryable."""
        assert is_retryable_error(TransportError("connection reset")) is True
        assert is_retryable_error(asyncio.TimeoutError()) is True

    def test_is_retryable_5xx_errors(self):
        """Test that 5xx server errors are retryable."""
        assert is_retryable_error(ProtocolError("boom", status=500)) is True
        assert is_retryable_error(ProtocolError("busy", status=503)) is True

    def test_is_not_retryable_4xx_errors(self):
        """Test that 4xx answers are not retryable."""
        for status in (400, 401, 403, 404):
            assert is_retryable_error(ProtocolError("nope", status=status)) is False

    def test_is_not_retryable_decode_error(self):
        """Test that a garbled body is not retried."""
        assert is_retryable_error(DecodeError("invalid JSON")) is False
        assert is_retryable_error(ValueError("test")) is False

    def test_is_auth_error_detection(self):
        """Test 401/403 detection."""
        assert is_auth_error(ProtocolError("unauthorized", status=401)) is True
        assert is_auth_error(ProtocolError("forbidden", status=403)) is True
        assert is_auth_error(ProtocolError("missing", status=404)) is False
        assert is_auth_error(ValueError("401 error")) is False

    def test_protocol_error_message(self):
        """Test that status and path are part of the message."""
        assert str(ProtocolError("unexpected HTTP status", status=401, path="api/portal/GetSystemList")) == (
            "unexpected HTTP status (status=401) path=api/portal/GetSystemList"
        )
        assert str(ProtocolError("unexpected HTTP status")) == "unexpected HTTP status"


class TestRetryWithBackoff:
    """Test retry logic with exponential backoff."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        """Test that successful call doesn't retry."""
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await async_retry_with_backoff(func, max_retries=3)
        assert result == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_success_after_retries(self):
        """Test that retry eventually succeeds."""
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise TransportError("timeout")
            return "success"

        result = await async_retry_with_backoff(func, max_retries=3, initial_delay=0.01)
        assert result == "success"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_max_retries_exceeded(self):
        """Test that max retries are respected."""
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            raise ProtocolError("unavailable", status=502)

        with pytest.raises(ProtocolError):
            await async_retry_with_backoff(func, max_retries=2, initial_delay=0.01)

        assert call_count == 3  # Initial + 2 retries

    @pytest.mark.asyncio
    async def test_no_retry_on_non_retryable_error(self):
        """Test that non-retryable errors fail immediately."""
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            raise ProtocolError("unauthorized", status=401)

        with pytest.raises(ProtocolError):
            await async_retry_with_backoff(func, max_retries=3, initial_delay=0.01)

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_exponential_backoff_timing(self):
        """Test that backoff delays increase exponentially."""
        delays = []
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise TransportError("connect failed")
            return "success"

        async def sleep_side_effect(delay):
            delays.append(delay)

        with patch("pywolfsmartset.retry.asyncio.sleep", side_effect=sleep_side_effect):
            await async_retry_with_backoff(
                func, max_retries=3, initial_delay=1.0, exponential_base=2.0, jitter=False
            )

        assert delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_max_delay_respected(self):
        """Test that max delay is not exceeded."""
        delays = []
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise TransportError("connect failed")
            return "success"

        async def sleep_side_effect(delay):
            delays.append(delay)

        with patch("pywolfsmartset.retry.asyncio.sleep", side_effect=sleep_side_effect):
            await async_retry_with_backoff(
                func,
                max_retries=3,
                initial_delay=10.0,
                max_delay=5.0,
                exponential_base=2.0,
                jitter=False,
            )

        assert delays == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_jitter_added(self):
        """Test that jitter stays within 25% of the base delay."""
        delays = []
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise TransportError("connect failed")
            return "success"

        async def sleep_side_effect(delay):
            delays.append(delay)

        with patch("pywolfsmartset.retry.asyncio.sleep", side_effect=sleep_side_effect):
            await async_retry_with_backoff(func, max_retries=3, initial_delay=1.0, jitter=True)

        assert len(delays) == 1
        assert 1.0 <= delays[0] <= 1.25

    @pytest.mark.asyncio
    async def test_context_logging(self):
        """Test that context is included in retry logging."""
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise TransportError("connect failed")
            return "success"

        with patch("pywolfsmartset.retry._LOGGER") as mock_logger:
            await async_retry_with_backoff(func, max_retries=3, initial_delay=0.01, context="TestContext")

        debug_calls = mock_logger.debug.call_args_list
        assert len(debug_calls) > 0
        assert any("TestContext" in str(call) for call in debug_calls)
