"""Tests for shared/retry.py."""

import asyncio

import httpx
import pytest

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    ValidationError,
)
from shared.retry import (
    ErrorKind,
    RetryPolicy,
    classify_error,
    user_message,
    with_retry,
)

FAST = RetryPolicy(max_attempts=3, initial_delay=0, max_delay=0, jitter=0, timeout=1)


class TestClassifyError:
    @pytest.mark.parametrize(
        "error,kind",
        [
            (httpx.ConnectError("refused"), ErrorKind.NETWORK),
            (asyncio.TimeoutError(), ErrorKind.NETWORK),
            (AuthenticationError("expired"), ErrorKind.AUTH),
            (AuthorizationError("nope"), ErrorKind.PERMISSION),
            (ExternalServiceError("down", service="x"), ErrorKind.SERVER),
            (Exception("infinite recursion detected in policy"), ErrorKind.PERMISSION),
            (Exception("42501 permission denied"), ErrorKind.PERMISSION),
            (Exception("JWT expired"), ErrorKind.AUTH),
            (Exception("Invalid session"), ErrorKind.AUTH),
            (Exception("500 Internal Server Error"), ErrorKind.SERVER),
            (ValueError("something odd"), ErrorKind.UNKNOWN),
        ],
    )
    def test_classification(self, error, kind):
        assert classify_error(error) == kind

    @pytest.mark.parametrize(
        "status,kind",
        [(401, ErrorKind.AUTH), (403, ErrorKind.PERMISSION), (503, ErrorKind.SERVER), (422, ErrorKind.UNKNOWN)],
    )
    def test_http_status_errors(self, status, kind):
        request = httpx.Request("GET", "http://api.test/")
        response = httpx.Response(status, request=request)
        error = httpx.HTTPStatusError("failed", request=request, response=response)
        assert classify_error(error) == kind


class TestUserMessage:
    def test_known_kind(self):
        assert "sign in again" in user_message(AuthenticationError("expired"))

    def test_unknown_surfaces_raw_message(self):
        assert user_message(ValueError("column trips.foo does not exist")) == "column trips.foo does not exist"


class TestRetryPolicy:
    def test_exponential_backoff_is_capped(self):
        policy = RetryPolicy(initial_delay=1, backoff_factor=2, max_delay=3, jitter=0)
        assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [1, 2, 3, 3]

    def test_jitter_stays_in_bounds(self):
        policy = RetryPolicy(initial_delay=1, jitter=0.1)
        for _ in range(20):
            assert 0.9 <= policy.delay_for(1) <= 1.1


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        async def operation():
            return "ok"

        assert await with_retry(operation, FAST) == "ok"

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        calls = []
        retries = []

        async def operation():
            calls.append(1)
            if len(calls) < 3:
                raise httpx.ConnectError("refused")
            return "ok"

        result = await with_retry(operation, FAST, on_retry=lambda n, e, d: retries.append(n))

        assert result == "ok"
        assert len(calls) == 3
        assert retries == [1, 2]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        calls = []

        async def operation():
            calls.append(1)
            raise ExternalServiceError("down", service="x")

        with pytest.raises(ExternalServiceError):
            await with_retry(operation, FAST)
        assert len(calls) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [AuthenticationError("expired"), AuthorizationError("denied"), ValidationError("bad")],
    )
    async def test_does_not_retry_non_transient_errors(self, error):
        calls = []

        async def operation():
            calls.append(1)
            raise error

        with pytest.raises(type(error)):
            await with_retry(operation, FAST)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_counts_as_network_error(self):
        policy = RetryPolicy(max_attempts=2, initial_delay=0, jitter=0, timeout=0.01)
        calls = []

        async def operation():
            calls.append(1)
            await asyncio.sleep(1)

        with pytest.raises(asyncio.TimeoutError):
            await with_retry(operation, policy)
        assert len(calls) == 2
