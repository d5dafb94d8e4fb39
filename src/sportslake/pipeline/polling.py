"""Polling helper shared by the crawler and query stages."""

import asyncio
import logging
from typing import Awaitable, Callable

from sportslake.errors import PollTimeoutError

logger = logging.getLogger(__name__)


async def poll_until(
    check: Callable[[], Awaitable[str]],
    is_pending: Callable[[str], bool],
    interval: float,
    max_polls: int | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "operation",
) -> str:
    """Request a status until it is no longer pending.

    Issues one status request, then waits `interval` seconds before the
    next one for as long as the status stays pending.

    Args:
        check: Coroutine function returning the current status
        is_pending: Predicate telling whether a status is still in progress
        interval: Seconds between status requests
        max_polls: Maximum status requests (None = unbounded)
        sleep: Awaitable sleep, replaceable in tests
        description: Label used in log and error messages

    Returns:
        The first non-pending status observed

    Raises:
        PollTimeoutError: If max_polls requests all returned pending
    """
    attempts = 0
    while True:
        status = await check()
        attempts += 1
        logger.info("%s state: %s", description, status)

        if not is_pending(status):
            return status

        if max_polls is not None and attempts >= max_polls:
            raise PollTimeoutError(
                f"{description} still {status} after {attempts} polls",
                last_status=status,
                attempts=attempts,
            )

        await sleep(interval)
