"""
Retry with error classification.

A single retry utility used by every call site that talks to the network.
Errors are classified first; only transient kinds (network, server) are
retried, so access-control failures are never masked as flakiness.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from .config import get_settings
from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Coarse error classes used to decide between retry, redirect and surfacing."""

    NETWORK = "network"
    AUTH = "auth"
    PERMISSION = "permission"
    SERVER = "server"
    UNKNOWN = "unknown"


TRANSIENT_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.SERVER})
ACCESS_KINDS = frozenset({ErrorKind.AUTH, ErrorKind.PERMISSION})

USER_MESSAGES = {
    ErrorKind.NETWORK: "Network error. Please check your connection and try again.",
    ErrorKind.AUTH: "Authentication session expired or invalid. Please sign in again.",
    ErrorKind.PERMISSION: "Access denied.",
    ErrorKind.SERVER: "Internal server error occurred. Please try again later.",
}


def classify_error(error: BaseException) -> ErrorKind:
    """
    Classify an exception into an ErrorKind.

    Typed errors are classified by type; anything else (e.g. PostgREST
    errors from the Supabase client) falls back to message inspection.
    """
    if isinstance(error, (httpx.TransportError, asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return ErrorKind.NETWORK
    if isinstance(error, AuthenticationError):
        return ErrorKind.AUTH
    if isinstance(error, AuthorizationError):
        return ErrorKind.PERMISSION
    if isinstance(error, ExternalServiceError):
        return ErrorKind.SERVER
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 401:
            return ErrorKind.AUTH
        if status == 403:
            return ErrorKind.PERMISSION
        if status >= 500:
            return ErrorKind.SERVER
        return ErrorKind.UNKNOWN

    message = str(getattr(error, "message", None) or error)
    if "infinite recursion" in message or "42P17" in message or "42501" in message:
        return ErrorKind.PERMISSION
    if "Invalid session" in message or "401" in message or "JWT" in message:
        return ErrorKind.AUTH
    if "403" in message or "Unauthorized" in message:
        return ErrorKind.PERMISSION
    if "500" in message or "Internal Server Error" in message:
        return ErrorKind.SERVER
    return ErrorKind.UNKNOWN


def user_message(error: BaseException, kind: Optional[ErrorKind] = None) -> str:
    """
    Message to show for an error.

    Unknown errors are surfaced verbatim so support triage sees the real cause.
    """
    kind = kind or classify_error(error)
    return USER_MESSAGES.get(kind) or str(error)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff parameters (seconds)."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    jitter: float = 0.1
    timeout: float = 30.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        settings = get_settings()
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay,
            max_delay=settings.retry_max_delay,
            backoff_factor=settings.retry_backoff_factor,
            jitter=settings.retry_jitter,
            timeout=settings.retry_timeout,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry following the given (1-indexed) failed attempt."""
        delay = min(self.initial_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)
        if self.jitter:
            delay += random.uniform(-self.jitter, self.jitter)
        return max(0.0, delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    classifier: Callable[[BaseException], ErrorKind] = classify_error,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
) -> T:
    """
    Run an async operation with bounded retries.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Backoff parameters (defaults to RetryPolicy())
        classifier: Maps an exception to an ErrorKind
        on_retry: Optional callback(attempt, error, delay) before each sleep

    Returns:
        The operation's result

    Raises:
        The last error once it is not retryable or attempts are exhausted
    """
    policy = policy or RetryPolicy()
    attempt = 0

    while True:
        attempt += 1
        try:
            return await asyncio.wait_for(operation(), timeout=policy.timeout)
        except Exception as error:
            kind = classifier(error)
            if kind not in TRANSIENT_KINDS or attempt >= policy.max_attempts:
                raise

            delay = policy.delay_for(attempt)
            logger.debug(
                f"Attempt {attempt}/{policy.max_attempts} failed ({kind.value}), "
                f"retrying in {delay:.2f}s"
            )
            if on_retry:
                on_retry(attempt, error, delay)
            await asyncio.sleep(delay)
