"""
Best-effort delivery with retry and capped exponential backoff.

Notifications are a side channel: a failed delivery is logged and reported
as False, it never raises into the calling pipeline. Only transient outcomes
(HTTP 429, any 5xx, or a transport failure) are retried; any other non-2xx
response ends delivery immediately.
"""
import time
from typing import Callable, Optional

import requests

from mediaops.utils import LogLevel, logger
from mediaops.utils.constants import INITIAL_BACKOFF_SECONDS, MAX_BACKOFF_SECONDS, MAX_DELIVERY_ATTEMPTS


def is_transient(status_code: Optional[int]) -> bool:
    """True for rate limiting, server errors and transport failures (None)."""
    if status_code is None:
        return True
    return status_code == 429 or 500 <= status_code <= 599


def deliver(
        send: Callable[[], requests.Response],
        *,
        label: str = "notification",
        max_attempts: int = MAX_DELIVERY_ATTEMPTS,
        initial_backoff: float = INITIAL_BACKOFF_SECONDS,
        max_backoff: float = MAX_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Call `send` until it returns a 2xx response or delivery is given up.

    Args:
        send: Performs one HTTP attempt and returns the response.
        label: Name used in log events.
        max_attempts: Retry ceiling, counting the first attempt.
        initial_backoff: Seconds to wait after the first transient failure.
        max_backoff: Upper bound for the doubling wait.
        sleep: Injected for tests.

    Returns:
        True if a 2xx response was received, False otherwise.
    """
    backoff = initial_backoff
    for attempt in range(1, max_attempts + 1):
        status: Optional[int]
        try:
            response = send()
            status = response.status_code
        except requests.RequestException as e:
            status = None
            logger.log("notify.transport_error", LogLevel.DEBUG, target=label, attempt=attempt, error=str(e))

        if status is not None and 200 <= status < 300:
            logger.log("notify.sent", LogLevel.DEBUG, target=label, attempt=attempt, status=status)
            return True

        if not is_transient(status):
            logger.log("notify.rejected", LogLevel.WARN, target=label, attempt=attempt, status=status)
            return False

        if attempt == max_attempts:
            break

        logger.log("notify.retry", LogLevel.DEBUG, target=label, attempt=attempt, status=status, wait=backoff)
        sleep(backoff)
        backoff = min(backoff * 2, max_backoff)

    logger.log("notify.gave_up", LogLevel.WARN, target=label, attempts=max_attempts)
    return False
