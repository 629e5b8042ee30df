"""Bounded exponential backoff around a boolean unit of work.

The controller knows nothing about the work it drives: ``unit_of_work``
reports success as ``True`` and failure as ``False`` and must not raise.
Attempts are counted down from ``max_attempts`` and the wait between rounds
doubles from ``initial_delay``. When the counter reaches zero after a failed
attempt the controller stops immediately, so ``unit_of_work`` runs at most
``max_attempts + 1`` times.

Waiting goes through the event loop timer (``asyncio.sleep`` by default), so
the thread is never blocked during a backoff delay. A synchronous
``unit_of_work`` runs directly on the event loop and blocks it for the length
of the attempt; the loop is meant to drive this single pipeline only.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Union

logger = logging.getLogger(__name__)

UnitOfWork = Callable[[], Union[bool, Awaitable[bool]]]
DoneCallback = Callable[[bool], None]
Sleep = Callable[[float], Awaitable[None]]


async def run_with_backoff(
    unit_of_work: UnitOfWork,
    max_attempts: int,
    initial_delay: float,
    on_done: DoneCallback,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """Run ``unit_of_work`` until it succeeds or the retry budget is spent.

    Returns the final outcome, which is also passed to ``on_done`` exactly
    once.
    """
    if max_attempts < 0:
        raise ValueError("max_attempts must not be negative")
    if initial_delay < 0:
        raise ValueError("initial_delay must not be negative")

    remaining = max_attempts
    delay = initial_delay
    attempt = 1

    while True:
        result = unit_of_work()
        if inspect.isawaitable(result):
            result = await result

        if result:
            logger.debug("Attempt %d succeeded", attempt)
            on_done(True)
            return True

        if remaining <= 0:
            logger.debug("Attempt %d failed; no retries left", attempt)
            on_done(False)
            return False

        logger.debug(
            "Attempt %d failed; waiting %.1f second(s) and trying again (%d retries left)",
            attempt,
            delay,
            remaining,
        )
        await sleep(delay)
        delay *= 2
        remaining -= 1
        attempt += 1


def retry_sync(
    unit_of_work: UnitOfWork,
    max_attempts: int,
    initial_delay: float,
    on_done: DoneCallback,
) -> bool:
    """Drive :func:`run_with_backoff` to completion on a fresh event loop."""
    return asyncio.run(
        run_with_backoff(unit_of_work, max_attempts, initial_delay, on_done)
    )
