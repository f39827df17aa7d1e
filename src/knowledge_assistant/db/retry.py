"""Bounded retries for transient knowledge store errors."""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from knowledge_assistant.config import Settings
from knowledge_assistant.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_TYPES = (
    ConnectionError,
    TimeoutError,
    OSError,
    DisconnectionError,
    InterfaceError,
)

_TRANSIENT_MESSAGES = (
    "database is locked",
    "connection reset",
    "connection refused",
    "server closed the connection",
    "timeout",
    "disk i/o error",
)


def is_transient_error(exc: BaseException) -> bool:
    """Check whether a store exception is a transient connection problem."""
    if isinstance(exc, _TRANSIENT_TYPES):
        return True
    if isinstance(exc, OperationalError):
        if exc.connection_invalidated:
            return True
        message = str(exc).lower()
        return any(fragment in message for fragment in _TRANSIENT_MESSAGES)
    return False


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    settings: Settings,
    description: str = "store operation",
) -> T:
    """Run a store operation, retrying transient errors with growing waits.

    Raises:
        StoreUnavailableError: If transient errors persist past the attempt limit
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(settings.STORE_RETRY_ATTEMPTS),
        wait=wait_incrementing(
            start=settings.STORE_RETRY_BACKOFF_SECONDS,
            increment=settings.STORE_RETRY_BACKOFF_SECONDS,
        ),
        retry=retry_if_exception(is_transient_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                return await operation()
    except _TRANSIENT_TYPES + (OperationalError,) as e:
        if not is_transient_error(e):
            raise
        logger.error(f"{description} failed after {settings.STORE_RETRY_ATTEMPTS} attempts: {e}")
        raise StoreUnavailableError(
            f"{description} failed: {e}", attempts=settings.STORE_RETRY_ATTEMPTS
        ) from e
