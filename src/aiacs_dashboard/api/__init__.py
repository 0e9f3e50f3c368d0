"""
Backend API - thin wrappers over the AIACS REST backend.

client.py     - HTTP session, auth refresh, error mapping
cameras.py    - cameras, PTZ control, presets
detections.py - detection history and bounding box detail
dashboard.py  - weather, bird activity, daily/species stats, direction data
playback.py   - NVR playback sessions and paginated history

Wrappers degrade to empty defaults on BackendError so a failing endpoint
leaves the rest of the dashboard running.
"""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from ..utils.constants import DEFAULT_RETRIES, DEFAULT_RETRY_DELAY
from .client import BackendClient, TokenStore
from .errors import AuthenticationExpired, BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    func: Callable[[], T],
    attempts: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_RETRY_DELAY,
    backoff: float = 1.0,
    label: str = "request",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call func, retrying transient backend failures.

    Retries timeouts, connection failures and 5xx responses.
    Does NOT retry 4xx client errors - those won't fix themselves.

    Args:
        func: Callable performing the request
        attempts: Total attempts including the first (default: 3)
        delay: Seconds to wait before the first retry (default: 2.0)
        backoff: Delay multiplier per retry (1.0 = fixed delay)
        label: Description used in log messages
        sleep: Sleep function (injectable for tests)

    Returns:
        Whatever func returns

    Raises:
        BackendError: The last error once attempts are exhausted, or
                      immediately for non-retryable errors
    """
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        try:
            return func()
        except BackendError as e:
            if not e.retryable or attempt >= attempts:
                if e.retryable:
                    logger.error(f"{label}: giving up after {attempts} attempts: {e}")
                raise
            wait = delay * (backoff ** (attempt - 1))
            logger.warning(f"{label}: retry {attempt}/{attempts - 1} in {wait}s: {e}")
            sleep(wait)

    raise BackendError(0, label, "Retry exhausted")


__all__ = [
    "AuthenticationExpired",
    "BackendClient",
    "BackendError",
    "TokenStore",
    "with_retry",
]
