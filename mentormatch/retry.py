"""
Retry and circuit breaking for calls to the hosted profile store.

exponential_backoff re-issues a request that failed for a transient
reason (timeout, dropped connection, 408/429/5xx). CircuitBreaker sits in
front of it so a store that keeps failing is not hit on every run.
"""

import functools
import time
from typing import Callable, Iterator, Optional, Tuple, Type

import requests

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

TRANSIENT_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "temporary failure",
    "service unavailable",
    "429",
    "500",
    "502",
    "503",
    "504",
)


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


class CircuitOpenError(Exception):
    """Raised when a call is refused because the circuit is open."""
    pass


def backoff_delays(
    max_retries: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float = 2.0,
) -> Iterator[float]:
    """Yield the sleep before each retry: base, base*f, base*f^2, ... capped at max_delay."""
    delay = base_delay
    for _ in range(max_retries):
        yield min(delay, max_delay)
        delay *= exponential_base


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator that retries a call with exponentially growing pauses.

    Args:
        max_retries: Retries after the first attempt (0 = call once)
        base_delay: Pause before the first retry, in seconds
        max_delay: Upper bound for any single pause
        exponential_base: Factor applied to the pause after each retry
        exceptions: Exception types that trigger a retry; others propagate
        on_retry: Optional callback(attempt, exception, delay)

    Raises:
        RetryError: When the last attempt also fails. The final error is
            chained as __cause__.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delays = backoff_delays(max_retries, base_delay, max_delay, exponential_base)
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    delay = next(delays, None)
                    if delay is None:
                        raise RetryError(f"Failed after {attempt} attempts: {e}") from e
                    if on_retry:
                        on_retry(attempt, e, delay)
                    time.sleep(delay)

        return wrapper
    return decorator


class CircuitBreaker:
    """
    Stops calling a failing store for a while.

    States:
    - CLOSED: calls pass through; failures are counted
    - OPEN: calls are refused with CircuitOpenError until recovery_timeout passes
    - HALF_OPEN: one trial call; success closes the circuit, failure reopens it
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        expected_exception: Type[Exception] = Exception,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.failure_count = 0
        self.opened_at: Optional[float] = None
        self.state = self.CLOSED

    def seconds_until_retry(self) -> float:
        if self.opened_at is None:
            return 0.0
        return max(0.0, self.recovery_timeout - (time.monotonic() - self.opened_at))

    def call(self, func: Callable, *args, **kwargs):
        """
        Run func unless the circuit is open.

        Raises:
            CircuitOpenError: If the circuit is open and not yet due for a trial
            Whatever func raises
        """
        if self.state == self.OPEN:
            if self.seconds_until_retry() > 0:
                raise CircuitOpenError(
                    f"Circuit breaker is OPEN. Store unavailable. "
                    f"Retry after {self.seconds_until_retry():.0f}s"
                )
            self.state = self.HALF_OPEN

        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._trip()
            raise
        self.reset()
        return result

    def _trip(self):
        self.failure_count += 1
        if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = self.OPEN
            self.opened_at = time.monotonic()

    def reset(self):
        self.failure_count = 0
        self.opened_at = None
        self.state = self.CLOSED


def is_transient_error(exception: Exception) -> bool:
    """
    Guess whether a failure is worth retrying.

    Timeouts and connection errors from requests always are. For anything
    else the message is checked for network and 5xx/429 markers, which
    also covers RetryError wrapping such a failure.
    """
    if isinstance(exception, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return True
    response = getattr(exception, "response", None)
    if response is not None and getattr(response, "status_code", None) is not None:
        return should_retry_http_status(response.status_code)
    message = str(exception).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


def should_retry_http_status(status_code: int) -> bool:
    """Rate limiting, request timeouts and gateway/server errors are retryable."""
    return status_code in RETRYABLE_STATUS_CODES
