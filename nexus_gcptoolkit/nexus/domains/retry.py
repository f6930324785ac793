"""Bounded retry with a fixed delay between attempts."""
import time
import logging
from typing import Callable, Tuple, Type, TypeVar

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retries(
    attempt: Callable[[], T],
    retries: int,
    delay: float,
    retry_on: Tuple[Type[BaseException], ...],
    sleep: Callable[[float], None] = time.sleep,
    description: str = "Could not connect to Nexus",
) -> T:
    """
    Call `attempt` until it succeeds, retrying up to `retries` times.

    Only exceptions in `retry_on` are retried; anything else propagates from
    the attempt that raised it. After the last failed attempt its exception
    is re-raised.

    Args:
        attempt: Zero-argument callable to run
        retries: Number of retries after the first attempt (>= 0)
        delay: Seconds to sleep between attempts
        retry_on: Exception classes that trigger a retry
        sleep: Sleep function, replaceable in tests
        description: Prefix of the log line emitted before each retry

    Returns:
        Whatever `attempt` returns
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")

    max_attempts = retries + 1

    def log_retry(retry_state: RetryCallState) -> None:
        remaining = max_attempts - retry_state.attempt_number
        logger.info(f"{description}, {remaining} attempt(s) left")

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=log_retry,
        sleep=sleep,
        reraise=True,
    )
    return retrying(attempt)
